# Copyright 2012 Hewlett-Packard Development Company, L.P.
# Copyright 2013 OpenStack Foundation
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

import argparse
import configparser
import logging
import logging.config
import os
import sys

from selmachine.lib.config import get_default
from selmachine.lib.logutil import MultiLineFormatter


LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'
QUIET_LOGGERS = ['keystoneauth', 'openstack', 'urllib3']


class SelmachineApp(object):
    app_name = None  # type: str
    app_description = None  # type: str

    def __init__(self):
        self.args = None
        self.config = None

    def _get_version(self):
        from selmachine.version import release_string
        return "selmachine version: %s" % release_string

    def createParser(self):
        parser = argparse.ArgumentParser(
            description=self.app_description,
            formatter_class=argparse.RawDescriptionHelpFormatter)
        parser.add_argument('-c', dest='config',
                            help='specify the config file')
        parser.add_argument('-d', dest='debug', action='store_true',
                            help='enable debug log')
        parser.add_argument('--version', dest='version', action='version',
                            version=self._get_version(),
                            help='show selmachine version')
        return parser

    def parseArguments(self, args=None):
        parser = self.createParser()
        self.args = parser.parse_args(args)
        return parser

    def readConfig(self):
        self.config = configparser.ConfigParser()
        if self.args.config:
            locations = [self.args.config]
        else:
            locations = ['~/.selmachine/selmachine.conf',
                         '/etc/selmachine/selmachine.conf']
        for fp in locations:
            if os.path.exists(os.path.expanduser(fp)):
                self.config.read(os.path.expanduser(fp))
                return
        if self.args.config:
            raise Exception("Unable to locate config file %s" %
                            self.args.config)

    def setup_logging(self, section, parameter):
        fp = get_default(self.config, section, parameter, expand_user=True)
        if fp:
            logging.config.fileConfig(fp, disable_existing_loggers=False)
            return
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(MultiLineFormatter(LOG_FORMAT))
        root = logging.getLogger()
        root.addHandler(handler)
        if getattr(self.args, 'debug', False):
            root.setLevel(logging.DEBUG)
        else:
            root.setLevel(logging.INFO)
            for name in QUIET_LOGGERS:
                logging.getLogger(name).setLevel(logging.WARNING)
