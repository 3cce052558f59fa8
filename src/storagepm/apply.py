# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from logging import Logger

from .controllers.common import ControllerContext
from .controllers.disk import set_disk_apm_level, set_disk_iosched, set_disk_spindown_timeout
from .controllers.sata import set_ahci_runtime_pm, set_sata_link_power
from .controllers.writeback import set_dirty_parms, set_laptopmode


##########################################################################################
# Constants
##########################################################################################

_log_prefix = 'storagepm: '

'''
Controllers in the order they are applied.
'''
_controllers = (
    set_disk_apm_level,
    set_disk_spindown_timeout,
    set_disk_iosched,
    set_sata_link_power,
    set_ahci_runtime_pm,
    set_laptopmode,
    set_dirty_parms,
)


##########################################################################################
# Functions
##########################################################################################

def apply_disk_policy(lg: Logger, ctx: ControllerContext) -> int:
    '''
    Apply the storage power policy for the current power mode.

    Arguments:
        lg  - system logger
        ctx - controller context

    Every controller runs, regardless of the outcome of the previous ones.
    Returns the number of controllers that reported failures.
    '''

    failed = 0

    for ctrl in _controllers:
        ret = ctrl(lg, ctx)
        if ret != 0:
            lg.warning(_log_prefix + f'{ctrl.__name__}({ctx.mode.value}) failed: {ret}')
            failed += 1

    return failed
