# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


from __future__ import annotations


##########################################################################################
# Imports
##########################################################################################

import sys

from dataclasses import dataclass
from pathlib import Path
from re import compile as rcompile
from typing import Iterable


##########################################################################################
# Constants
##########################################################################################

'''
Exit codes for missing required configuration sources.
'''
ERR_DEFAULTS_MISSING = 5
ERR_USER_MISSING = 6

'''
Intrinsic defaults, shipped with the package.
'''
_defaults_path = Path(__file__).parent / 'defaults.conf'

_site_dir = Path('/etc/storagepm.d')
_user_path = Path('/etc/storagepm.conf')
_legacy_path = Path('/etc/default/storagepm')

'''
Grammar for a single configuration line. The value is either a bare token
or a double-quoted string which may contain blanks.
'''
_value_chars = r'-0-9a-zA-Z_.:,+/'
_line_re = rcompile(r'^([A-Z_][A-Z_0-9]*)=(?:([' + _value_chars + r']*)|"([' + _value_chars + r' ]*)")$')


##########################################################################################
# Exceptions
##########################################################################################

class MissingSourceError(RuntimeError):
    '''
    A required configuration source is missing.

    code - exit code identifying the missing source
    '''

    def __init__(self, msg: str, code: int):
        super().__init__(msg)

        self.code = code


##########################################################################################
# Dataclass definitions
##########################################################################################

@dataclass(frozen=True)
class ConfigSources:
    '''
    Dataclass encoding the layered configuration sources.

    defaults - intrinsic defaults (required)
    site_dir - site customization directory, *.conf files processed in sorted order
    user     - user override file
    legacy   - fallback for the user override file
    '''

    defaults: Path = _defaults_path
    site_dir: Path = _site_dir
    user: Path = _user_path
    legacy: Path = _legacy_path

    def ordered(self) -> list[Path]:
        '''
        Resolve the sources to an ordered list of existing paths.

        Raises MissingSourceError if the defaults are missing, or if both
        the user file and its legacy fallback are missing.
        '''

        if not self.defaults.is_file():
            raise MissingSourceError(f'cannot read intrinsic defaults: {self.defaults}', ERR_DEFAULTS_MISSING)

        paths = [self.defaults]

        if self.site_dir.is_dir():
            paths.extend(sorted(p for p in self.site_dir.glob('*.conf') if p.is_file()))

        if self.user.is_file():
            paths.append(self.user)
        elif self.legacy.is_file():
            paths.append(self.legacy)
        else:
            raise MissingSourceError(f'cannot read user configuration: {self.user}', ERR_USER_MISSING)

        return paths


##########################################################################################
# Functions
##########################################################################################

def parse_line(line: str) -> tuple[str, str]:
    '''
    Parse a single configuration line.

    Returns a (name, value) tuple, or None if the line does not match
    the configuration grammar.

    Arguments:
        line - the line to parse (without line terminator)
    '''

    m = _line_re.match(line)
    if m is None:
        return None

    name, bare, quoted = m.groups()

    return (name, quoted if quoted is not None else bare)


##########################################################################################
# Class definitions
##########################################################################################

class ConfigStore:
    '''
    Ordered name/value store built from layered configuration sources.

    A name keeps the position of its first definition, while the
    value of the last definition wins. The store is frozen once
    loading is complete.
    '''

    def __init__(self):
        self._entries: list[list[str]] = list()
        self._index: dict[str, int] = dict()
        self._frozen = False

    def __len__(self) -> int:
        return len(self._entries)

    def _apply_text(self, text: str) -> None:
        for line in text.splitlines():
            res = parse_line(line)
            if res is None:
                continue

            self.set(*res)

    @staticmethod
    def load(paths: Iterable[Path]) -> ConfigStore:
        '''
        Create a store by applying configuration files in order.

        Paths that are not files are skipped.

        Arguments:
            paths - ordered configuration file paths, lowest precedence first
        '''

        store = ConfigStore()

        for path in paths:
            path = Path(path)
            if not path.is_file():
                continue

            store._apply_text(path.read_text(encoding='utf-8', errors='replace'))

        store._frozen = True

        return store

    @staticmethod
    def from_sources(sources: ConfigSources = None) -> ConfigStore:
        '''
        Create a store from the layered configuration sources.

        Arguments:
            sources - the sources to use (system locations if None)
        '''

        if sources is None:
            sources = ConfigSources()

        return ConfigStore.load(sources.ordered())

    def set(self, name: str, value: str) -> None:
        '''
        Set a configuration value.

        An existing entry is overwritten in place, a new one is appended.

        Arguments:
            name  - name of the entry
            value - new value of the entry
        '''

        if self._frozen:
            raise RuntimeError(f'config store is frozen: {name}')

        pos = self._index.get(name)
        if pos is None:
            self._index[name] = len(self._entries)
            self._entries.append([name, value])
        else:
            self._entries[pos][1] = value

    def get(self, name: str, default: str = None) -> str:
        pos = self._index.get(name)
        if pos is None:
            return default

        return self._entries[pos][1]

    def settings(self, name: str) -> list[str]:
        '''
        Get a configuration value split into a list of blank separated tokens.

        Arguments:
            name - name of the entry
        '''

        return self.get(name, '').split()

    def names(self) -> list[str]:
        return [name for name, _ in self._entries]

    def serialize(self) -> str:
        '''
        Serialize the store into re-parseable NAME="value" lines, in store order.
        '''

        return ''.join(f'{name}="{value}"\n' for name, value in self._entries)

    def write_snapshot(self, path: Path) -> None:
        '''
        Write a serialized snapshot of the store.

        Arguments:
            path - target path, or '-' for the standard output
        '''

        data = self.serialize()

        if str(path) == '-':
            sys.stdout.write(data)
            return

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data, encoding='utf-8')
