# Copyright 2014 Rackspace Australia
# Copyright 2024 Acme Gating, LLC
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

import abc
import logging

from selmachine.lib.logutil import get_annotated_logger
from selmachine.lib.voluputil import Integer, Text


class Flag:
    """A configuration option the host exposes for a driver.

    Each flag may be set on the command line (``name`` prefixed by two
    dashes), through ``env_var``, or fall back to ``default``.
    """

    def __init__(self, name, env_var=None, help=None, default=None):
        self.name = name
        self.env_var = env_var
        self.help = help
        self.default = default

    @property
    def option(self):
        return '--' + self.name

    @property
    def attribute(self):
        return self.name.replace('-', '_')

    def getValidator(self):
        raise NotImplementedError()

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.name)


class StringFlag(Flag):
    def getValidator(self):
        return Text(msg="%s must be a string" % self.option)


class IntFlag(Flag):
    def getValidator(self):
        return Integer(msg="%s must be a non-negative integer" % self.option)


class Driver(object, metaclass=abc.ABCMeta):
    """A machine driver.

    A driver is registered with the host under its ``name`` and
    supplies the flags needed to create a machine as well as the
    machine objects themselves.
    """

    name = None

    @abc.abstractmethod
    def getCreateFlags(self):
        """Return a list of Flag objects accepted by create"""
        pass

    @abc.abstractmethod
    def getMachine(self, machine_name, store_path):
        """Return a new, unconfigured machine object"""
        pass


class BaseMachine(metaclass=abc.ABCMeta):
    """Base class for machines.

    This carries the fields the host owns for every machine regardless
    of driver and declares the lifecycle operations the host may call.
    """

    DEFAULT_SSH_USER = 'root'
    DEFAULT_SSH_PORT = 22
    base_log = logging.getLogger("selmachine.Machine")

    def __init__(self, machine_name, store_path):
        self.machine_name = machine_name
        self.store_path = store_path
        self.log = get_annotated_logger(self.base_log, machine=machine_name)
        self.ip_address = ''
        self.ssh_user = self.DEFAULT_SSH_USER
        self.ssh_port = self.DEFAULT_SSH_PORT
        self.ssh_key_path = ''

    def driverName(self):
        raise NotImplementedError()

    def setConfigFromFlags(self, options):
        """Configure the machine from a mapping of flag name to value

        Values which were not supplied should be omitted or None.
        """
        raise NotImplementedError()

    def preCreateCheck(self):
        """Verify that create is expected to succeed

        This is called by the host before create and may perform
        remote lookups.
        """
        pass

    def create(self):
        raise NotImplementedError()

    def remove(self):
        raise NotImplementedError()

    def start(self):
        raise NotImplementedError()

    def stop(self):
        raise NotImplementedError()

    def restart(self):
        raise NotImplementedError()

    def kill(self):
        raise NotImplementedError()

    def getState(self):
        """Return a MachineState"""
        raise NotImplementedError()

    def getIP(self):
        raise NotImplementedError()

    def getURL(self):
        raise NotImplementedError()

    def getSSHHostname(self):
        return self.getIP()

    def getSSHUsername(self):
        return self.ssh_user

    def getSSHPort(self):
        return self.ssh_port

    def getSSHKeyPath(self):
        return self.ssh_key_path

    def toDict(self):
        return {
            'MachineName': self.machine_name,
            'StorePath': self.store_path,
            'IPAddress': self.ip_address,
            'SSHUser': self.ssh_user,
            'SSHPort': self.ssh_port,
            'SSHKeyPath': self.ssh_key_path,
        }

    def fromDict(self, data):
        self.machine_name = data.get('MachineName', self.machine_name)
        self.store_path = data.get('StorePath', self.store_path)
        self.ip_address = data.get('IPAddress', '')
        self.ssh_user = data.get('SSHUser', self.DEFAULT_SSH_USER)
        self.ssh_port = data.get('SSHPort', self.DEFAULT_SSH_PORT)
        self.ssh_key_path = data.get('SSHKeyPath', '')
