# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from logging import Logger
from pathlib import Path

from ..device_classifier import BusType, DeviceRef
from ..policy import Disposition, assign, is_sentinel, trace
from ..sysfs_helper import read_sysfs, write_sysfs
from .common import ControllerContext


##########################################################################################
# Constants
##########################################################################################

_sys_block = Path('/sys/block')

'''
Transports known to corrupt data or hang on the APM command.
'''
_no_apm_types = (BusType.Usb, BusType.IEEE1394)

'''
Transports hdparm cannot spin down.
'''
_no_spindown_types = (BusType.Nvme,)


##########################################################################################
# Internal functions
##########################################################################################

def _disk_pairs(lg: Logger, ctx: ControllerContext, func: str, settings: list[str]) -> list[tuple[DeviceRef, str]]:
    '''
    Resolve the configured disks and pair them with their settings.

    Returns the list of pairs, or None if the controller is not configured.

    Arguments:
        lg       - system logger
        ctx      - controller context
        func     - name of the controller function
        settings - the settings list
    '''

    devices = ctx.store.settings('DISK_DEVICES')

    if len(devices) == 0:
        lg.debug(ctx.where(func, 'no_disks'))
        return None

    if len(settings) == 0:
        lg.debug(ctx.where(func, 'not_configured'))
        return None

    refs = [ctx.classifier.resolve(dev) for dev in devices]

    return assign(refs, settings)

def _read_schedulers(name: str) -> tuple[list[str], str]:
    '''
    Read the I/O schedulers of a disk.

    Returns a tuple of the available schedulers and the active one.

    Arguments:
        name - kernel name of the disk
    '''

    raw = read_sysfs(_sys_block / name / 'queue' / 'scheduler')
    if raw is None:
        return ([], None)

    available = list()
    active = None

    for token in raw.split():
        if token.startswith('[') and token.endswith(']'):
            token = token[1:-1]
            active = token

        available.append(token)

    return (available, active)


##########################################################################################
# Functions
##########################################################################################

def set_disk_apm_level(lg: Logger, ctx: ControllerContext) -> int:
    '''
    Set the advanced power management level of the configured disks.

    Arguments:
        lg  - system logger
        ctx - controller context

    Returns the number of failed writes.
    '''

    func = 'set_disk_apm_level'

    pairs = _disk_pairs(lg, ctx, func, ctx.mode_settings('DISK_APM_LEVEL'))
    if pairs is None:
        return 0

    errors = 0

    for ref, apm in pairs:
        where = ctx.where(func, ref.canonical_name)

        if ref.is_absent:
            trace(lg, where, 'disk', ref.identifier, apm, Disposition.Missing)
        elif is_sentinel(apm):
            trace(lg, where, 'disk', ref.identifier, apm, Disposition.Keep)
        elif ref.bus_type in _no_apm_types:
            trace(lg, where, f'disk type={ref.bus_type.value}', ref.identifier, apm, Disposition.NotSupported)
        elif not ctx.classifier.provider.supports_apm(ref.canonical_name):
            trace(lg, where, 'disk', ref.identifier, apm, Disposition.NotSupported)
        else:
            rc = ctx.classifier.provider.set_apm(ref.canonical_name, apm)
            if rc != 0:
                errors += 1

            trace(lg, where, 'disk', ref.identifier, apm, Disposition.Written if rc == 0 else Disposition.Failed, rc)

    return errors

def set_disk_spindown_timeout(lg: Logger, ctx: ControllerContext) -> int:
    '''
    Set the spin down timeout of the configured disks.

    Arguments:
        lg  - system logger
        ctx - controller context

    Returns the number of failed writes.
    '''

    func = 'set_disk_spindown_timeout'

    pairs = _disk_pairs(lg, ctx, func, ctx.mode_settings('DISK_SPINDOWN_TIMEOUT'))
    if pairs is None:
        return 0

    errors = 0

    for ref, timeout in pairs:
        where = ctx.where(func, ref.canonical_name)

        if ref.is_absent:
            trace(lg, where, 'disk', ref.identifier, timeout, Disposition.Missing)
        elif is_sentinel(timeout):
            trace(lg, where, 'disk', ref.identifier, timeout, Disposition.Keep)
        elif ref.bus_type in _no_spindown_types:
            trace(lg, where, f'disk type={ref.bus_type.value}', ref.identifier, timeout, Disposition.NotSupported)
        else:
            rc = ctx.classifier.provider.set_spindown(ref.canonical_name, timeout)
            if rc != 0:
                errors += 1

            trace(lg, where, 'disk', ref.identifier, timeout, Disposition.Written if rc == 0 else Disposition.Failed, rc)

    return errors

def set_disk_iosched(lg: Logger, ctx: ControllerContext) -> int:
    '''
    Set the I/O scheduler of the configured disks.

    Arguments:
        lg  - system logger
        ctx - controller context

    The scheduler is not power mode dependent. Returns the number of
    failed writes.
    '''

    func = 'set_disk_iosched'

    pairs = _disk_pairs(lg, ctx, func, ctx.store.settings('DISK_IOSCHED'))
    if pairs is None:
        return 0

    errors = 0

    for ref, sched in pairs:
        where = ctx.where(func, ref.canonical_name)

        if ref.is_absent:
            trace(lg, where, 'disk', ref.identifier, sched, Disposition.Missing)
            continue

        if is_sentinel(sched):
            trace(lg, where, 'disk', ref.identifier, sched, Disposition.Keep)
            continue

        available, active = _read_schedulers(ref.canonical_name)

        if not sched in available:
            trace(lg, where, 'disk', ref.identifier, sched, Disposition.NotSupported)
            continue

        if sched == active:
            rc = 0
        else:
            rc = write_sysfs(_sys_block / ref.canonical_name / 'queue' / 'scheduler', sched)

        if rc != 0:
            errors += 1

        trace(lg, where, 'disk', ref.identifier, sched, Disposition.Written if rc == 0 else Disposition.Failed, rc)

    return errors
