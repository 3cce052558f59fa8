# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from logging import Logger
from pathlib import Path

from ..policy import Disposition, trace
from ..sysfs_helper import check_sysfs, write_sysfs
from .common import ControllerContext, parse_uint


##########################################################################################
# Constants
##########################################################################################

_proc_sys = Path('/proc/sys')

_laptop_mode = 'vm/laptop_mode'

'''
Dirty page and buffer age controls, all in centiseconds.
'''
_dirty_controls = (
    'vm/dirty_writeback_centisecs',
    'vm/dirty_expire_centisecs',
    'fs/xfs/age_buffer_centisecs',
    'fs/xfs/xfsbufd_centisecs',
    'fs/xfs/xfssyncd_centisecs',
)


##########################################################################################
# Functions
##########################################################################################

def set_laptopmode(lg: Logger, ctx: ControllerContext) -> int:
    '''
    Set the laptop mode disk idle timeout.

    Arguments:
        lg  - system logger
        ctx - controller context

    Returns zero on success, or one if the write failed.
    '''

    func = 'set_laptopmode'

    idle = parse_uint(ctx.mode_value('DISK_IDLE_SECS'))
    if idle is None:
        lg.debug(ctx.where(func, 'not_configured'))
        return 0

    ctrl = _proc_sys / _laptop_mode
    if not check_sysfs(ctrl):
        trace(lg, ctx.where(func), 'ctrl', _laptop_mode, str(idle), Disposition.Missing)
        return 0

    rc = write_sysfs(ctrl, idle)

    trace(lg, ctx.where(func), 'ctrl', _laptop_mode, str(idle), Disposition.Written if rc == 0 else Disposition.Failed, rc)

    return 0 if rc == 0 else 1

def set_dirty_parms(lg: Logger, ctx: ControllerContext) -> int:
    '''
    Set the dirty page age and the write-back interval.

    Arguments:
        lg  - system logger
        ctx - controller context

    The configured value is in seconds, the kernel expects centiseconds.
    Controls missing on the running kernel are skipped.

    Returns the number of failed writes.
    '''

    func = 'set_dirty_parms'

    age = parse_uint(ctx.mode_value('MAX_LOST_WORK_SECS'))
    if age is None:
        lg.debug(ctx.where(func, 'not_configured'))
        return 0

    age *= 100
    errors = 0

    for name in _dirty_controls:
        ctrl = _proc_sys / name
        if not check_sysfs(ctrl):
            continue

        rc = write_sysfs(ctrl, age)
        if rc != 0:
            errors += 1

        trace(lg, ctx.where(func), 'ctrl', name, str(age), Disposition.Written if rc == 0 else Disposition.Failed, rc)

    return errors
