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

from selmachine.model import MachineState


# Compute server status -> host machine state
SERVER_STATES = {
    'ACTIVE': MachineState.RUNNING,
    'PAUSED': MachineState.PAUSED,
    'SUSPENDED': MachineState.SAVED,
    'SHUTOFF': MachineState.STOPPED,
    'BUILD': MachineState.STARTING,
    'ERROR': MachineState.ERROR,
}

SERVER_PASSWORD_HASH_KEY = 'x_sel_server_password_hash'
SERVER_PASSWORD_HASH = '$6$server_password_hash'


class SelectelDefaults:
    """Default values used by the selectel driver

    The volume name and type are templates; they are formatted with
    the server name and availability zone respectively.
    """

    def __init__(self,
                 ssh_user='root',
                 ssh_port=22,
                 ssh_key_name='docker-machine-key',
                 volume_name='volume for {server_name}',
                 volume_type='fast.{availability_zone}',
                 volume_size=5,
                 cpu=1,
                 ram=512,
                 image_name='Ubuntu 16.04 LTS 64-bit',
                 engine_port=2376,
                 volume_wait_attempts=10,
                 volume_wait_interval=1,
                 server_wait_attempts=10,
                 server_wait_interval=4):
        self.ssh_user = ssh_user
        self.ssh_port = ssh_port
        self.ssh_key_name = ssh_key_name
        self.volume_name = volume_name
        self.volume_type = volume_type
        self.volume_size = volume_size
        self.cpu = cpu
        self.ram = ram
        self.image_name = image_name
        self.engine_port = engine_port
        self.volume_wait_attempts = volume_wait_attempts
        self.volume_wait_interval = volume_wait_interval
        self.server_wait_attempts = server_wait_attempts
        self.server_wait_interval = server_wait_interval

    def getVolumeName(self, server_name):
        return self.volume_name.format(server_name=server_name)

    def getVolumeType(self, availability_zone):
        return self.volume_type.format(availability_zone=availability_zone)
