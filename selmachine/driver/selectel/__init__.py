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

from selmachine.driver import Driver, IntFlag, StringFlag
from selmachine.driver.selectel import (
    selectelmachine,
    selectelmodel,
)


class SelectelDriver(Driver):
    name = 'selectel'
    _machine_class = selectelmachine.SelectelMachine

    def __init__(self, defaults=None):
        self.defaults = defaults or selectelmodel.SelectelDefaults()

    def getCreateFlags(self):
        d = self.defaults
        return [
            # OpenStack
            StringFlag('os-auth-url', 'OS_AUTH_URL',
                       'OpenStack authentication URL'),
            StringFlag('os-region', 'OS_REGION_NAME',
                       'OpenStack region name'),
            StringFlag('os-availability-zone', 'OS_AVAILABILITY_ZONE',
                       'OpenStack availability zone'),
            StringFlag('os-domain-name', 'OS_PROJECT_DOMAIN_NAME',
                       'OpenStack domain name (identity v3 only)'),
            StringFlag('os-username', 'OS_USERNAME',
                       'OpenStack username'),
            StringFlag('os-password', 'OS_PASSWORD',
                       'OpenStack user password'),
            StringFlag('os-project-id', 'OS_PROJECT_ID',
                       'OpenStack project id'),
            StringFlag('os-flavor-id', 'OS_FLAVOR_ID',
                       'OpenStack flavor id to use for the instance'),
            StringFlag('os-flavor-name', 'OS_FLAVOR_NAME',
                       'OpenStack flavor name to use for the instance'),
            StringFlag('os-image-name', 'OS_IMAGE_NAME',
                       'OpenStack image name to use for the instance '
                       '(default: %s)' % d.image_name),
            StringFlag('os-image-id', 'OS_IMAGE_ID',
                       'OpenStack image id to use for the instance'),
            StringFlag('os-net-id', 'OS_NETWORK_ID',
                       'OpenStack network id the machine will be '
                       'connected on'),
            # SSH
            StringFlag('sel-ssh-user', 'SEL_SSH_USER',
                       'SSH user for connecting to the server',
                       d.ssh_user),
            IntFlag('sel-ssh-port', 'SEL_SSH_PORT',
                    'SSH port for connecting to the server',
                    d.ssh_port),
            StringFlag('sel-ssh-pair-name', 'SEL_SSH_PAIR_NAME',
                       'Existing keypair name', d.ssh_key_name),
            StringFlag('sel-ssh-private-key-path', 'SEL_SSH_PRIVATE_KEY_PATH',
                       'Private keyfile to use for SSH (absolute path)'),
            # Volume
            StringFlag('sel-volume-name', 'SEL_VOLUME_NAME',
                       'Name of the server volume'),
            StringFlag('sel-volume-type', 'SEL_VOLUME_TYPE',
                       'Base volume type for server'),
            IntFlag('sel-volume-size', 'SEL_VOLUME_SIZE',
                    'Volume size', d.volume_size),
            # Other
            StringFlag('sel-server-name', 'SEL_SERVER_NAME',
                       'Name of future server'),
            StringFlag('sel-proxy', 'SEL_PROXY',
                       'Proxy for the OS services'),
            IntFlag('sel-cpu', 'SEL_CPU_VALUE',
                    'Count of vCPU for server', d.cpu),
            IntFlag('sel-ram', 'SEL_RAM_VALUE',
                    'Count of RAM for server', d.ram),
        ]

    def getMachine(self, machine_name, store_path):
        return self._machine_class(machine_name, store_path,
                                   flags=self.getCreateFlags(),
                                   defaults=self.defaults)
