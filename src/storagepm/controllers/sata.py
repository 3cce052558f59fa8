# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from logging import Logger
from pathlib import Path

from ..policy import Disposition, is_sentinel, trace
from ..sysfs_helper import write_sysfs, wordinlist
from .common import ControllerContext, parse_uint


##########################################################################################
# Constants
##########################################################################################

_scsi_host = Path('/sys/class/scsi_host')
_sys_block = Path('/sys/block')
_pci_devices = Path('/sys/bus/pci/devices')

_alpm_file = 'link_power_management_policy'

_runtime_pm_controls = ('on', 'auto')


##########################################################################################
# Internal functions
##########################################################################################

def _host_number(path: Path) -> int:
    try:
        return int(path.name.removeprefix('host'))

    except ValueError:
        return -1

def _sata_hosts() -> list[Path]:
    '''
    List all SCSI hosts providing link power management, in host number order.
    '''

    if not _scsi_host.is_dir():
        return []

    hosts = list()

    for entry in _scsi_host.iterdir():
        if not entry.name.startswith('host'):
            continue

        if (entry / _alpm_file).is_file():
            hosts.append(entry)

    return sorted(hosts, key=_host_number)

def _runtime_pm_disks() -> list[Path]:
    if not _sys_block.is_dir():
        return []

    return sorted(p / 'device' / 'power' for p in _sys_block.glob('sd*') if (p / 'device' / 'power').is_dir())

def _runtime_pm_ports() -> list[Path]:
    if not _pci_devices.is_dir():
        return []

    return sorted(p / 'power' for p in _pci_devices.glob('*/ata*') if (p / 'power').is_dir())


##########################################################################################
# Functions
##########################################################################################

def set_sata_link_power(lg: Logger, ctx: ControllerContext) -> int:
    '''
    Set the SATA link power management policy of all SCSI hosts.

    Arguments:
        lg  - system logger
        ctx - controller context

    The configured values are an ordered preference list. A value the
    kernel rejects is dropped for good and the next one is tried. The
    shortened list carries over to the following hosts. Reaching a keep
    token leaves the host untouched, the token itself is never dropped.

    Returns the number of hosts for which no value was accepted.
    '''

    func = 'set_sata_link_power'

    pwrlist = ctx.mode_settings('SATA_LINKPWR')
    if len(pwrlist) == 0:
        lg.debug(ctx.where(func, 'not_configured'))
        return 0

    blacklist = ctx.store.get('SATA_LINKPWR_BLACKLIST', '')

    ctrl_avail = False
    errors = 0

    for host in _sata_hosts():
        ctrl_avail = True
        where = ctx.where(func, host.name)

        if wordinlist(host.name, blacklist):
            trace(lg, where, 'host', host.name, ' '.join(pwrlist), Disposition.Blacklisted)
            continue

        if len(pwrlist) == 0:
            trace(lg, where, 'host', host.name, '-', Disposition.NotSupported)
            errors += 1
            continue

        while len(pwrlist) > 0:
            pwr = pwrlist[0]

            if is_sentinel(pwr):
                trace(lg, where, 'host', host.name, pwr, Disposition.Keep)
                break

            rc = write_sysfs(host / _alpm_file, pwr)
            if rc == 0:
                trace(lg, where, 'host', host.name, pwr, Disposition.Written, rc)
                break

            trace(lg, where, 'host', host.name, pwr, Disposition.Failed, rc)
            pwrlist.pop(0)
        else:
            errors += 1

    if not ctrl_avail:
        lg.debug(ctx.where(func, 'not_available'))

    return errors

def set_ahci_runtime_pm(lg: Logger, ctx: ControllerContext) -> int:
    '''
    Set runtime power management for SATA disks and AHCI ports.

    Arguments:
        lg  - system logger
        ctx - controller context

    The autosuspend delay of every disk is written first, the control mode
    after that. Enabling auto control while the kernel's negative default
    delay is in effect can suspend a disk for good. If any disk write fails,
    the ports are left untouched.

    Returns the number of failed writes, or zero on success.
    '''

    func = 'set_ahci_runtime_pm'

    control = ctx.mode_value('AHCI_RUNTIME_PM')
    timeout = parse_uint(ctx.store.get('AHCI_RUNTIME_PM_TIMEOUT'))

    if not control in _runtime_pm_controls or timeout is None:
        lg.debug(ctx.where(func, 'not_configured'))
        return 0

    disks = _runtime_pm_disks()
    delay = timeout * 1000

    errors = 0

    for power in disks:
        name = power.parent.parent.name

        rc = write_sysfs(power / 'autosuspend_delay_ms', delay)
        if rc != 0:
            errors += 1

        trace(lg, ctx.where(func, 'delay'), 'disk', name, str(delay), Disposition.Written if rc == 0 else Disposition.Failed, rc)

    if errors > 0:
        lg.debug(ctx.where(func, 'abort') + f': {errors} autosuspend delay write(s) failed')
        return errors

    for power in disks:
        name = power.parent.parent.name

        rc = write_sysfs(power / 'control', control)
        if rc != 0:
            errors += 1

        trace(lg, ctx.where(func, 'control'), 'disk', name, control, Disposition.Written if rc == 0 else Disposition.Failed, rc)

    if errors > 0:
        lg.debug(ctx.where(func, 'abort') + f': {errors} control write(s) failed')
        return errors

    for power in _runtime_pm_ports():
        port = power.parent.name

        rc = write_sysfs(power / 'control', control)
        if rc != 0:
            errors += 1

        trace(lg, ctx.where(func, 'port'), 'port', port, control, Disposition.Written if rc == 0 else Disposition.Failed, rc)

    return errors
