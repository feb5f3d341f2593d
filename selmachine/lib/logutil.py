# Copyright 2019 BMW Group
# Copyright 2021 Acme Gating, LLC
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import logging


def get_annotated_logger(logger, machine=None, operation=None):
    # Log adapters cannot be stacked, so extend the existing one in
    # place if we were handed an adapter.
    if isinstance(logger, MachineLogAdapter):
        extra = logger.extra
    else:
        extra = {}

    if machine is not None:
        extra['machine'] = machine

    if operation is not None:
        extra['operation'] = operation

    if isinstance(logger, MachineLogAdapter):
        return logger

    return MachineLogAdapter(logger, extra)


class MachineLogAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        msg, kwargs = super().process(msg, kwargs)
        extra = kwargs.get('extra', {})
        machine = extra.get('machine')
        operation = extra.get('operation')
        new_msg = []
        if machine is not None:
            new_msg.append('[machine: %s]' % machine)
        if operation is not None:
            new_msg.append('[op: %s]' % operation)
        new_msg.append(msg)
        msg = ' '.join(new_msg)
        return msg, kwargs

    def addHandler(self, *args, **kw):
        return self.logger.addHandler(*args, **kw)


class MultiLineFormatter(logging.Formatter):
    def format(self, record):
        rec = super().format(record)
        ret = []
        # Save the existing message and re-use this record object to
        # format each line.
        saved_msg = record.message
        for i, line in enumerate(rec.split('\n')):
            if i:
                record.message = '  ' + line
                ret.append(self.formatMessage(record))
            else:
                ret.append(line)
        # Restore the message
        record.message = saved_msg
        return '\n'.join(ret)
