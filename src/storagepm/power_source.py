# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from enum import Enum
from logging import Logger
from pathlib import Path

from psutil import sensors_battery

from .config_store import ConfigStore
from .sysfs_helper import read_sysfs


##########################################################################################
# Enumerator definitions
##########################################################################################

class PowerMode(Enum):
    AC  = 'ac'
    BAT = 'bat'

    @property
    def on_battery(self) -> bool:
        return self == PowerMode.BAT

    @property
    def key_suffix(self) -> str:
        return '_ON_BAT' if self.on_battery else '_ON_AC'


##########################################################################################
# Constants
##########################################################################################

_sysfs_base = Path('/sys/class/power_supply')

_log_prefix = 'power source: '

_mains_types = ('Mains', 'USB')


##########################################################################################
# Internal functions
##########################################################################################

def _sysfs_state() -> bool:
    '''
    Check the power supply class for an external power source.

    Returns True if a mains supply is online, False if mains supplies
    exist but none is online, and None if there are no mains supplies.
    '''

    if not _sysfs_base.is_dir():
        return None

    found = False

    for supply in sorted(_sysfs_base.iterdir()):
        if not read_sysfs(supply / 'type') in _mains_types:
            continue

        online = read_sysfs(supply / 'online')
        if online is None or not online.isdigit():
            continue

        found = True

        if int(online) == 1:
            return True

    return False if found else None

def _psutil_state() -> bool:
    try:
        battery = sensors_battery()

    except Exception:
        return None

    if battery is None:
        return None

    return battery.power_plugged


##########################################################################################
# Functions
##########################################################################################

def parse_mode(value: str) -> PowerMode:
    '''
    Parse a power mode name (case insensitive).

    Returns the power mode, or None if the name is not valid.

    Arguments:
        value - the name to parse
    '''

    if value is None:
        return None

    try:
        return PowerMode(value.lower())

    except ValueError:
        return None

def get_power_mode(lg: Logger, store: ConfigStore) -> PowerMode:
    '''
    Determine the current power mode.

    Arguments:
        lg    - system logger
        store - the resolved configuration

    The power supply class is checked first, then psutil. If both
    are inconclusive, DEFAULT_MODE from the configuration decides.
    '''

    state = _sysfs_state()
    if state is None:
        state = _psutil_state()

    if state is not None:
        return PowerMode.AC if state else PowerMode.BAT

    mode = parse_mode(store.get('DEFAULT_MODE'))
    if mode is None:
        mode = PowerMode.AC

    lg.info(_log_prefix + f'power source undetermined (assuming {mode.value})')

    return mode
