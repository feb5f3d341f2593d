# Copyright 2015 Rackspace Australia
# Copyright 2023-2024 Acme Gating, LLC
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


class ConfigurationError(Exception):
    pass


class MissingOptionError(ConfigurationError):
    def __init__(self, description, flag, env_var=None):
        self.description = description
        self.flag = flag
        self.env_var = env_var
        if env_var:
            message = ("%s must be specified either using the environment "
                       "variable %s or the CLI option %s" %
                       (description, env_var, flag))
        else:
            message = ("%s must be specified using the CLI option %s" %
                       (description, flag))
        super(MissingOptionError, self).__init__(message)


class ExclusiveOptionsError(ConfigurationError):
    def __init__(self, first, second):
        self.first = first
        self.second = second
        message = "Either %s or %s must be specified, not both" % (
            first, second)
        super(ExclusiveOptionsError, self).__init__(message)


class AuthenticationError(Exception):
    pass


class NotSupportedError(Exception):
    pass


# Provider exceptions
class LaunchStatusException(Exception):
    pass


class TimeoutException(Exception):
    pass


class NoFreeFloatingIPError(Exception):
    def __init__(self, msg="no free floating ip in project"):
        super(NoFreeFloatingIPError, self).__init__(msg)


# Machine store exceptions
class MachineNotFound(Exception):
    def __init__(self, name):
        self.name = name
        message = "Machine %s does not exist" % name
        super(MachineNotFound, self).__init__(message)


class MachineExists(Exception):
    def __init__(self, name):
        self.name = name
        message = "Machine %s already exists" % name
        super(MachineExists, self).__init__(message)
