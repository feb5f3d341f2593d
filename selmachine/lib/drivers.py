# Copyright 2015 Rackspace Australia
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

import logging

import selmachine.driver.selectel


class DriverRegistry(object):
    """A registry of machine drivers"""

    log = logging.getLogger("selmachine.DriverRegistry")

    def __init__(self, drivers=None):
        self.drivers = {}

        if drivers is None:
            drivers = [selmachine.driver.selectel.SelectelDriver()]
        for driver in drivers:
            self.registerDriver(driver)

    def registerDriver(self, driver):
        if driver.name in self.drivers:
            raise Exception("Driver %s already registered" % driver.name)
        self.log.debug("Registered driver %s", driver.name)
        self.drivers[driver.name] = driver

    def getDriver(self, name):
        if name not in self.drivers:
            raise Exception("Unknown driver %s" % name)
        return self.drivers[name]

    def newMachine(self, driver_name, machine_name, store_path):
        driver = self.getDriver(driver_name)
        return driver.getMachine(machine_name, store_path)

    def loadMachine(self, driver_name, data, store_path):
        """Rebuild a machine from a record previously saved by the host."""
        driver = self.getDriver(driver_name)
        machine = driver.getMachine(data['MachineName'], store_path)
        machine.fromDict(data)
        return machine
