# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from pathlib import Path
from typing import Iterable


##########################################################################################
# Functions
##########################################################################################

def read_sysfs(path: Path) -> str:
    '''
    Read from a sysfs path.

    Returns the read result as a string, or None if the read failed.

    Arguments:
        path - the path from which to read
    '''

    try:
        data = path.read_text(encoding='utf-8').rstrip()

    except Exception:
        data = None

    return data

def write_sysfs(path: Path, value: str | int) -> int:
    '''
    Write to a sysfs path, but only if the current content differs.

    Returns zero on success, or a positive error code on failure:
        1 - the control file does not exist
        2 - the write was rejected

    Arguments:
        path  - the path to which to write
        value - the value to write
    '''

    if not path.is_file():
        return 1

    value = str(value)

    if read_sysfs(path) == value:
        return 0

    try:
        path.write_text(value, encoding='utf-8')

    except Exception:
        return 2

    return 0

def check_sysfs(path: Path) -> bool:
    return path.exists()

def wordinlist(word: str, words: str | Iterable[str]) -> bool:
    '''
    Check if a word is a member of a word list.

    Arguments:
        word  - the word to look for
        words - either a blank separated string or an iterable of words
    '''

    if isinstance(words, str):
        words = words.split()

    return word in words
