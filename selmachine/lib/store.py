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

import json
import logging
import os
import shutil

from selmachine import exceptions


class MachineStore:
    """Keeps the host's copy of each machine record on disk.

    Each machine lives in ``<path>/machines/<name>/config.json``::

        {"DriverName": "selectel", "Driver": {...}}

    The driver itself never touches this; the host saves the record
    after every operation that may have changed it.
    """

    log = logging.getLogger("selmachine.MachineStore")
    CONFIG_FILE = 'config.json'

    def __init__(self, path):
        self.path = os.path.expanduser(path)
        self.machines_path = os.path.join(self.path, 'machines')

    def getMachinePath(self, name):
        if not name or os.sep in name or name in ('.', '..'):
            raise ValueError("Invalid machine name: %r" % (name,))
        return os.path.join(self.machines_path, name)

    def _getConfigPath(self, name):
        return os.path.join(self.getMachinePath(name), self.CONFIG_FILE)

    def exists(self, name):
        return os.path.exists(self._getConfigPath(name))

    def save(self, driver_name, machine):
        path = self.getMachinePath(machine.machine_name)
        os.makedirs(path, mode=0o700, exist_ok=True)
        data = {
            'DriverName': driver_name,
            'Driver': machine.toDict(),
        }
        config_path = self._getConfigPath(machine.machine_name)
        tmp_path = config_path + '.tmp'
        with open(tmp_path, 'w') as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp_path, config_path)
        self.log.debug("Saved machine %s to %s",
                       machine.machine_name, config_path)

    def load(self, name):
        """Return a (driver name, record dict) tuple"""
        config_path = self._getConfigPath(name)
        try:
            with open(config_path) as f:
                data = json.load(f)
        except FileNotFoundError:
            raise exceptions.MachineNotFound(name)
        return data['DriverName'], data['Driver']

    def remove(self, name):
        if not self.exists(name):
            raise exceptions.MachineNotFound(name)
        shutil.rmtree(self.getMachinePath(name))
        self.log.debug("Removed machine %s from store", name)

    def list(self):
        if not os.path.isdir(self.machines_path):
            return []
        return sorted(
            name for name in os.listdir(self.machines_path)
            if os.path.exists(self._getConfigPath(name)))
