# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


##########################################################################################
# Imports
##########################################################################################

from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatchcase
from pathlib import Path
from re import compile as rcompile
from subprocess import DEVNULL, run as prun


##########################################################################################
# Enumerator definitions
##########################################################################################

class BusType(Enum):
    Nvme     = 'nvme'
    Ata      = 'ata'
    Usb      = 'usb'
    IEEE1394 = 'ieee1394'
    Unknown  = 'unknown'
    Absent   = 'absent'


##########################################################################################
# Constants
##########################################################################################

_alias_dir = Path('/dev/disk/by-id')
_dev_dir = Path('/dev')

_part_re = rcompile(r'-part[0-9]+$')

'''
Ordered ID_PATH patterns, the PCI path takes precedence over the raw bus
value, since bridged controllers can report a misleading ID_BUS.
'''
_path_patterns = (
    ('pci-*-nvme-*', BusType.Nvme),
    ('pci-*-ata-*', BusType.Ata),
    ('pci-*-usb-*', BusType.Usb),
    ('pci-*-ieee1394-*', BusType.IEEE1394),
)

_bus_values = (BusType.Nvme, BusType.Ata, BusType.Usb, BusType.IEEE1394)


##########################################################################################
# Dataclass definitions
##########################################################################################

@dataclass(frozen=True)
class DeviceRef:
    '''
    Dataclass encoding a resolved storage device.

    identifier     - the device identifier as given in the configuration
    canonical_name - kernel name of the device (e.g. sda)
    bus_type       - transport the device is attached with
    '''

    identifier: str
    canonical_name: str
    bus_type: BusType

    @property
    def is_absent(self) -> bool:
        return self.bus_type == BusType.Absent


##########################################################################################
# Functions
##########################################################################################

def classify_path(id_path: str, id_bus: str) -> BusType:
    '''
    Classify a device by its udev path and bus descriptors.

    Arguments:
        id_path - value of the ID_PATH property (or None)
        id_bus  - value of the ID_BUS property (or None)
    '''

    if id_path:
        for pattern, bus_type in _path_patterns:
            if fnmatchcase(id_path, pattern):
                return bus_type

    for bus_type in _bus_values:
        if id_bus == bus_type.value:
            return bus_type

    return BusType.Unknown

def parse_properties(raw: str) -> dict[str, str]:
    '''
    Parse KEY=value lines as emitted by "udevadm info -q property".

    Arguments:
        raw - the raw udevadm output
    '''

    props = dict()

    for line in raw.splitlines():
        key, sep, value = line.partition('=')
        if not sep:
            continue

        props[key.strip()] = value.strip()

    return props


##########################################################################################
# Class definitions
##########################################################################################

class CapabilityProvider:
    '''
    Interface to the hardware identification and disk tuning tools.
    '''

    def classify(self, device: str) -> BusType:
        raise NotImplementedError

    def supports_apm(self, device: str) -> bool:
        raise NotImplementedError

    def set_apm(self, device: str, level: str) -> int:
        raise NotImplementedError

    def set_spindown(self, device: str, timeout: str) -> int:
        raise NotImplementedError

class UdevHdparmProvider(CapabilityProvider):
    '''
    Capability provider backed by udevadm and hdparm.

    Tool failures never raise, they are reported as an unknown bus,
    a negative capability probe or a non-zero status.
    '''

    def __init__(self, dev_dir: Path = _dev_dir, udevadm: str = 'udevadm', hdparm: str = 'hdparm'):
        self.dev_dir = dev_dir
        self.udevadm = udevadm
        self.hdparm = hdparm

    def _run(self, p_args: tuple) -> tuple[int, str]:
        try:
            p = prun(p_args, stdin=DEVNULL, capture_output=True, encoding='utf-8', errors='replace', check=False)

        except OSError:
            return (127, '')

        return (p.returncode, p.stdout)

    def _node(self, device: str) -> str:
        return (self.dev_dir / device).as_posix()

    def classify(self, device: str) -> BusType:
        ret, out = self._run((self.udevadm, 'info', '-q', 'property', self._node(device)))
        if ret != 0:
            return BusType.Unknown

        props = parse_properties(out)

        return classify_path(props.get('ID_PATH'), props.get('ID_BUS'))

    def supports_apm(self, device: str) -> bool:
        ret, out = self._run((self.hdparm, '-I', self._node(device)))
        if ret != 0:
            return False

        for line in out.splitlines():
            if 'Advanced power management level' in line:
                return not 'not supported' in line

        return False

    def set_apm(self, device: str, level: str) -> int:
        ret, _ = self._run((self.hdparm, '-q', '-B', level, self._node(device)))

        return ret

    def set_spindown(self, device: str, timeout: str) -> int:
        ret, _ = self._run((self.hdparm, '-q', '-S', timeout, self._node(device)))

        return ret

class DeviceClassifier:
    '''
    Resolve configured disk identifiers to kernel devices and classify them.
    '''

    def __init__(self, provider: CapabilityProvider, alias_dir: Path = _alias_dir, dev_dir: Path = _dev_dir):
        self.provider = provider
        self.alias_dir = alias_dir
        self.dev_dir = dev_dir

    def canonical_name(self, identifier: str) -> str:
        '''
        Map a disk identifier to the kernel device name.

        Arguments:
            identifier - either a /dev/disk/by-id alias (partition suffix allowed)
                         or a kernel device name
        '''

        disk_id = _part_re.sub('', identifier)
        alias = self.alias_dir / disk_id

        if alias.is_symlink():
            return alias.resolve().name

        return identifier

    def resolve(self, identifier: str) -> DeviceRef:
        '''
        Resolve a disk identifier.

        Arguments:
            identifier - the identifier to resolve

        A device without a device node resolves to BusType.Absent.
        '''

        name = self.canonical_name(identifier)

        if not (self.dev_dir / name).exists():
            return DeviceRef(identifier, name, BusType.Absent)

        return DeviceRef(identifier, name, self.provider.classify(name))
