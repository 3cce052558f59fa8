# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from argparse import ArgumentParser
from logging.handlers import SysLogHandler
from logging import DEBUG, INFO, Logger, StreamHandler, getLogger
from pathlib import Path

from ..apply import apply_disk_policy
from ..config_store import ConfigSources, ConfigStore, MissingSourceError
from ..controllers.common import ControllerContext
from ..device_classifier import DeviceClassifier, UdevHdparmProvider
from ..power_source import get_power_mode, parse_mode


##########################################################################################
# Constants
##########################################################################################

_log_prefix = 'storagepm: '

_syslog_socket = Path('/dev/log')

'''
Snapshot of the resolved configuration, for consumers running later.
'''
_snapshot_path = Path('/run/storagepm/run.conf')


##########################################################################################
# Internal functions
##########################################################################################

def _setup_logger(verbose: bool) -> Logger:
    lg = getLogger()

    if not lg.handlers:
        if _syslog_socket.is_socket():
            lg.addHandler(SysLogHandler(_syslog_socket.as_posix()))
        else:
            lg.addHandler(StreamHandler())

    lg.setLevel(DEBUG if verbose else INFO)

    return lg


##########################################################################################
# Main
##########################################################################################

def main(args: list[str]) -> int:
    '''
    Main function.

    Arguments:
        args - list of string arguments from the CLI
    '''

    parser = ArgumentParser(prog='storagepm')

    parser.add_argument('-m', '--mode', default='auto', choices=('auto', 'ac', 'bat'), help='Power mode to apply settings for')
    parser.add_argument('-d', '--dump', default=_snapshot_path.as_posix(), help='Path for the configuration snapshot (- for standard output)')
    parser.add_argument('--dump-only', action='store_true', help='Only write the configuration snapshot')
    parser.add_argument('-v', '--verbose', action='store_true', help='Emit trace records')

    parsed_args = parser.parse_args(args[1:])

    lg = _setup_logger(parsed_args.verbose)

    try:
        store = ConfigStore.from_sources(ConfigSources())

    except MissingSourceError as err:
        lg.error(_log_prefix + f'error: {err}')

        return err.code

    try:
        store.write_snapshot(parsed_args.dump)

    except OSError as exc:
        lg.error(_log_prefix + f'error: failed to write config snapshot: {exc}')

        return 2

    if parsed_args.dump_only:
        return 0

    if parsed_args.mode == 'auto':
        mode = get_power_mode(lg, store)
    else:
        mode = parse_mode(parsed_args.mode)

    lg.info(_log_prefix + f'applying storage power policy ({mode.value})')

    ctx = ControllerContext(store, mode, DeviceClassifier(UdevHdparmProvider()))

    if apply_disk_policy(lg, ctx) != 0:
        return 1

    return 0
