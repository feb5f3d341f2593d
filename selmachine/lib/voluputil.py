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

# This adds some helpers that are useful for mutating hyphenated flag
# names into underscored python attribute names.

import voluptuous as vs


class Optional(vs.Optional):
    """Mark an attribute optional and mutate its name

    This mutates the name of the attribute to lowercase it and replace
    hyphens with underscores.  This enables the output of the
    validator to be used directly in setting python object attributes.

    """
    def __init__(self, schema, default=vs.UNDEFINED, output=None):
        if not isinstance(schema, str):
            raise Exception("Only strings are supported")
        super().__init__(schema, default=default)
        if output is None:
            output = str(schema).replace('-', '_').lower()
        self.output = output

    def __call__(self, data):
        # Superclass ensures that data==schema
        super().__call__(data)
        # Return our mutated form
        return self.output


def Integer(msg=None):
    """Accept ints and strings of digits (as found in the environment)."""
    return vs.All(vs.Coerce(int, msg=msg), vs.Range(min=0, msg=msg))


def Text(msg=None):
    """Accept any scalar and return it as a stripped string."""
    return vs.All(vs.Coerce(str, msg=msg), str.strip)


def drop_unset(data):
    """Remove keys with a value of None so that schema defaults apply."""
    return {k: v for k, v in data.items() if v is not None}
