# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from enum import Enum
from logging import Logger
from typing import Sequence, TypeVar


##########################################################################################
# Constants
##########################################################################################

'''
Tokens which leave the current hardware setting untouched.
'''
SENTINELS = ('_', 'keep')

T = TypeVar('T')


##########################################################################################
# Enumerator definitions
##########################################################################################

class Disposition(Enum):
    Written       = 'written'
    Failed        = 'failed'
    NotSupported  = 'not_supported'
    Keep          = 'keep'
    Missing       = 'missing'
    Blacklisted   = 'blacklisted'


##########################################################################################
# Functions
##########################################################################################

def is_sentinel(token: str) -> bool:
    return token in SENTINELS

def assign(devices: Sequence[T], settings: Sequence[str]) -> list[tuple[T, str]]:
    '''
    Pair each device with a setting.

    Arguments:
        devices  - ordered list of devices
        settings - ordered list of setting tokens

    Settings are consumed one per device. Once the settings are exhausted,
    the last one applies to all remaining devices. No settings at all
    yields no pairs.
    '''

    if len(settings) == 0:
        return []

    last = len(settings) - 1

    return [(dev, settings[min(j, last)]) for j, dev in enumerate(devices)]

def trace(lg: Logger, where: str, kind: str, ident: str, value: str, disposition: Disposition, rc: int = None) -> None:
    '''
    Emit a trace record for a single policy decision.

    Arguments:
        lg          - system logger
        where       - controller and context, e.g. set_disk_apm_level(bat).sda
        kind        - kind of object the decision applies to (disk, host, ...)
        ident       - identifier of the object
        value       - the setting the decision is about
        disposition - outcome of the decision
        rc          - status of the write (if any)
    '''

    rc_str = '-' if rc is None else str(rc)

    lg.debug(f'{where}: {kind} [{ident}] {value} -- {disposition.value}; rc={rc_str}')
