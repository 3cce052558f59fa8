# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from logging import DEBUG, getLogger
from pathlib import Path

import pytest

from storagepm.config_store import ConfigStore
from storagepm.controllers.common import ControllerContext
from storagepm.device_classifier import BusType, CapabilityProvider, DeviceClassifier
from storagepm.power_source import PowerMode


##########################################################################################
# Class definitions
##########################################################################################

class FakeProvider(CapabilityProvider):
    '''
    Capability provider returning fixed answers and recording every write.
    '''

    def __init__(self):
        self.bus = dict()
        self.apm = dict()
        self.rc = dict()
        self.writes = list()

    def classify(self, device: str) -> BusType:
        return self.bus.get(device, BusType.Ata)

    def supports_apm(self, device: str) -> bool:
        return self.apm.get(device, True)

    def set_apm(self, device: str, level: str) -> int:
        self.writes.append(('apm', device, level))
        return self.rc.get(device, 0)

    def set_spindown(self, device: str, timeout: str) -> int:
        self.writes.append(('spindown', device, timeout))
        return self.rc.get(device, 0)


##########################################################################################
# Fixtures
##########################################################################################

@pytest.fixture
def lg():
    logger = getLogger('storagepm.test')
    logger.setLevel(DEBUG)
    return logger

@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()

@pytest.fixture
def dev_dir(tmp_path: Path) -> Path:
    '''
    Device directory with the nodes sda, sdb, sdc and nvme0n1.
    '''

    path = tmp_path / 'dev'
    path.mkdir()

    for name in ('sda', 'sdb', 'sdc', 'nvme0n1'):
        (path / name).touch()

    return path

@pytest.fixture
def alias_dir(tmp_path: Path) -> Path:
    path = tmp_path / 'by-id'
    path.mkdir()
    return path

@pytest.fixture
def classifier(provider, alias_dir, dev_dir) -> DeviceClassifier:
    return DeviceClassifier(provider, alias_dir=alias_dir, dev_dir=dev_dir)

@pytest.fixture
def make_ctx(classifier):
    '''
    Factory for controller contexts from a plain mapping of config values.
    '''

    def factory(values: dict, mode: PowerMode = PowerMode.BAT) -> ControllerContext:
        store = ConfigStore()

        for name, value in values.items():
            store.set(name, value)

        return ControllerContext(store, mode, classifier)

    return factory
