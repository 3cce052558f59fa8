# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from dataclasses import dataclass

from ..config_store import ConfigStore
from ..device_classifier import DeviceClassifier
from ..power_source import PowerMode


##########################################################################################
# Dataclass definitions
##########################################################################################

@dataclass(frozen=True)
class ControllerContext:
    '''
    Dataclass encoding the state all controllers borrow during one invocation.

    store      - the resolved (frozen) configuration
    mode       - the power mode to apply settings for
    classifier - resolver for the configured disks
    '''

    store: ConfigStore
    mode: PowerMode
    classifier: DeviceClassifier

    def mode_settings(self, base: str) -> list[str]:
        '''
        Get the settings list of a power mode dependent parameter.

        Arguments:
            base - parameter name without the _ON_AC/_ON_BAT suffix
        '''

        return self.store.settings(base + self.mode.key_suffix)

    def mode_value(self, base: str) -> str:
        return self.store.get(base + self.mode.key_suffix, '').strip()

    def where(self, func: str, detail: str = None) -> str:
        '''
        Build the location part of a trace record.

        Arguments:
            func   - name of the controller function
            detail - optional detail (device or host name)
        '''

        ret = f'{func}({self.mode.value})'
        if detail is not None:
            ret += f'.{detail}'

        return ret


##########################################################################################
# Functions
##########################################################################################

def parse_uint(value: str) -> int:
    '''
    Parse a non-negative integer.

    Returns the integer, or None if the value is not a plain non-negative integer.

    Arguments:
        value - the string to parse
    '''

    if value is None:
        return None

    value = value.strip()
    if not value.isascii() or not value.isdigit():
        return None

    return int(value)
