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
import sys

import prettytable

import selmachine.cmd
from selmachine import exceptions
from selmachine.lib.config import get_default, get_section
from selmachine.lib.drivers import DriverRegistry
from selmachine.lib.logutil import get_annotated_logger
from selmachine.lib.store import MachineStore


DEFAULT_STORAGE_PATH = '~/.selmachine'
DEFAULT_DRIVER = 'selectel'


class MachineApp(selmachine.cmd.SelmachineApp):
    app_name = 'selmachine'
    app_description = 'Create and manage machines on Selectel.'
    log = logging.getLogger("selmachine.MachineApp")

    def __init__(self, registry=None):
        super().__init__()
        self.registry = registry or DriverRegistry()
        self.store = None

    def createParser(self):
        parser = super(MachineApp, self).createParser()
        parser.add_argument('-s', dest='storage_path',
                            help='machine storage path')

        subparsers = parser.add_subparsers(title='commands',
                                           description='valid commands',
                                           help='additional help')

        cmd_create = subparsers.add_parser('create', help='create a machine')
        cmd_create.add_argument('name', help='machine name')
        cmd_create.add_argument('--driver', default=DEFAULT_DRIVER,
                                choices=sorted(self.registry.drivers),
                                help='driver to create the machine with '
                                     '(default: %(default)s)')
        seen = set()
        for driver in self.registry.drivers.values():
            for flag in driver.getCreateFlags():
                if flag.name in seen:
                    continue
                seen.add(flag.name)
                help_text = flag.help or ''
                if flag.env_var:
                    help_text += ' [$%s]' % flag.env_var
                cmd_create.add_argument(flag.option, dest=flag.attribute,
                                        default=None, help=help_text)
        cmd_create.set_defaults(func=self.create)

        cmd_rm = subparsers.add_parser('rm', help='remove a machine')
        cmd_rm.add_argument('name', help='machine name')
        cmd_rm.set_defaults(func=self.remove)

        for name, func, help_text in [
                ('start', self.start, 'start a machine'),
                ('stop', self.stop, 'stop a machine'),
                ('restart', self.restart, 'restart a machine'),
                ('kill', self.kill, 'forcefully stop a machine'),
                ('status', self.status, 'show the state of a machine'),
                ('ip', self.ip, 'show the IP address of a machine'),
                ('url', self.url, 'show the docker URL of a machine'),
                ('inspect', self.inspect, 'show the stored machine record'),
        ]:
            cmd = subparsers.add_parser(name, help=help_text)
            cmd.add_argument('name', help='machine name')
            cmd.set_defaults(func=func)

        cmd_ls = subparsers.add_parser('ls', help='list machines')
        cmd_ls.set_defaults(func=self.list)

        return parser

    def parseArguments(self, args=None):
        parser = super(MachineApp, self).parseArguments(args)
        if not getattr(self.args, 'func', None):
            parser.print_help()
            sys.exit(1)
        return parser

    def getStoragePath(self):
        if self.args.storage_path:
            return self.args.storage_path
        if os.environ.get('MACHINE_STORAGE_PATH'):
            return os.environ['MACHINE_STORAGE_PATH']
        return get_default(self.config, 'storage', 'path',
                           DEFAULT_STORAGE_PATH, expand_user=True)

    def getCreateOptions(self, driver):
        """Collect the create options for a driver

        An option is taken from the command line, then the environment,
        then the driver's section of the config file.  Options which
        are not found anywhere are left to the flag default.
        """
        section = get_section(self.config, driver.name)
        options = {}
        for flag in driver.getCreateFlags():
            value = getattr(self.args, flag.attribute, None)
            if value is None and flag.env_var:
                value = os.environ.get(flag.env_var) or None
            if value is None:
                value = section.get(flag.name) or None
            options[flag.name] = value
        return options

    def annotateMachine(self, machine):
        machine.log = get_annotated_logger(
            machine.log, operation=self.args.func.__name__)
        return machine

    def loadMachine(self, name):
        driver_name, data = self.store.load(name)
        machine = self.registry.loadMachine(
            driver_name, data, self.store.getMachinePath(name))
        return self.annotateMachine(machine)

    def saveMachine(self, machine):
        self.store.save(machine.driverName(), machine)

    # Commands

    def create(self):
        name = self.args.name
        if self.store.exists(name):
            raise exceptions.MachineExists(name)
        driver = self.registry.getDriver(self.args.driver)
        machine = self.registry.newMachine(
            driver.name, name, self.store.getMachinePath(name))
        self.annotateMachine(machine)
        machine.setConfigFromFlags(self.getCreateOptions(driver))
        try:
            self.log.info("Running pre-create checks for %s", name)
            machine.preCreateCheck()
            self.log.info("Creating machine %s", name)
            machine.create()
        finally:
            # Keep whatever was created so that rm can clean it up
            self.saveMachine(machine)
        ip = machine.getIP()
        self.saveMachine(machine)
        print(ip)
        return True

    def remove(self):
        machine = self.loadMachine(self.args.name)
        self.log.info("Removing machine %s", self.args.name)
        machine.remove()
        self.store.remove(self.args.name)
        print("Removed %s" % self.args.name)
        return True

    def start(self):
        machine = self.loadMachine(self.args.name)
        machine.start()
        return True

    def stop(self):
        machine = self.loadMachine(self.args.name)
        machine.stop()
        return True

    def restart(self):
        machine = self.loadMachine(self.args.name)
        machine.restart()
        return True

    def kill(self):
        machine = self.loadMachine(self.args.name)
        machine.kill()
        return True

    def status(self):
        machine = self.loadMachine(self.args.name)
        print(machine.getState())
        return True

    def ip(self):
        machine = self.loadMachine(self.args.name)
        ip = machine.getIP()
        self.saveMachine(machine)
        print(ip)
        return True

    def url(self):
        machine = self.loadMachine(self.args.name)
        url = machine.getURL()
        self.saveMachine(machine)
        print(url)
        return True

    def inspect(self):
        driver_name, data = self.store.load(self.args.name)
        print(json.dumps({'DriverName': driver_name, 'Driver': data},
                         indent=2, sort_keys=True))
        return True

    def list(self):
        table = prettytable.PrettyTable(
            field_names=['Name', 'Driver', 'IP'])
        for name in self.store.list():
            driver_name, data = self.store.load(name)
            table.add_row([name, driver_name, data.get('IPAddress', '')])
        print(table)
        return True

    def runCommand(self):
        """Run the selected command and return the exit status"""
        self.store = MachineStore(self.getStoragePath())
        try:
            if self.args.func():
                return 0
            return 1
        except Exception as e:
            log = get_annotated_logger(
                self.log, machine=getattr(self.args, 'name', None),
                operation=self.args.func.__name__)
            log.error("Command failed: %s", e, exc_info=self.args.debug)
            print("Error: %s" % e, file=sys.stderr)
            return 1

    def main(self, args=None):
        self.parseArguments(args)
        self.readConfig()
        self.setup_logging('logging', 'log_config')
        sys.exit(self.runCommand())


def main():
    MachineApp().main()
