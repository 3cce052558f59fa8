# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0


import pytest

from storagepm.config_store import (
    ERR_DEFAULTS_MISSING,
    ERR_USER_MISSING,
    ConfigSources,
    ConfigStore,
    MissingSourceError,
    parse_line,
)


@pytest.fixture
def sources(tmp_path):
    defaults = tmp_path / 'defaults.conf'
    defaults.write_text('DISK_DEVICES="sda sdb"\nDISK_IOSCHED=keep\n')

    site_dir = tmp_path / 'storagepm.d'
    site_dir.mkdir()

    user = tmp_path / 'storagepm.conf'
    user.write_text('# user overrides\n')

    return ConfigSources(defaults=defaults, site_dir=site_dir, user=user, legacy=tmp_path / 'legacy')


class TestParseLine:
    def test_bare_value(self):
        assert parse_line('DISK_APM_LEVEL_ON_BAT=128') == ('DISK_APM_LEVEL_ON_BAT', '128')

    def test_quoted_value_with_blanks(self):
        assert parse_line('DISK_DEVICES="nvme0n1 sda"') == ('DISK_DEVICES', 'nvme0n1 sda')

    def test_empty_values(self):
        assert parse_line('FOO=') == ('FOO', '')
        assert parse_line('FOO=""') == ('FOO', '')

    def test_name_with_digits(self):
        assert parse_line('FOO2=x') == ('FOO2', 'x')
        assert parse_line('A1_B=x') == ('A1_B', 'x')

    @pytest.mark.parametrize('line', [
        '# DISK_DEVICES="sda"',
        '',
        '   ',
        'disk_devices=sda',
        '1FOO=bar',
        'FOO = bar',
        'FOO=bar baz',
        'FOO="unterminated',
        'FOO=$(rm -rf /)',
        ' FOO=bar',
    ])
    def test_ignored_lines(self, line):
        assert parse_line(line) is None


class TestConfigStore:
    def test_get_default(self):
        store = ConfigStore()

        assert store.get('MISSING') is None
        assert store.get('MISSING', 'x') == 'x'

    def test_explicit_empty_value_is_not_default(self, tmp_path):
        conf = tmp_path / 'a.conf'
        conf.write_text('FOO=\n')

        store = ConfigStore.load([conf])

        assert store.get('FOO', 'x') == ''

    def test_override_keeps_first_position(self, tmp_path):
        first = tmp_path / 'a.conf'
        first.write_text('ALPHA=1\nNAME=a\nOMEGA=1\n')

        second = tmp_path / 'b.conf'
        second.write_text('EXTRA=2\nNAME=b\n')

        store = ConfigStore.load([first, second])

        assert store.get('NAME') == 'b'
        assert store.names() == ['ALPHA', 'NAME', 'OMEGA', 'EXTRA']

    def test_missing_paths_are_skipped(self, tmp_path):
        conf = tmp_path / 'a.conf'
        conf.write_text('FOO=1\n')

        store = ConfigStore.load([tmp_path / 'missing.conf', conf])

        assert store.get('FOO') == '1'
        assert len(store) == 1

    def test_loaded_store_is_frozen(self, tmp_path):
        store = ConfigStore.load([])

        with pytest.raises(RuntimeError):
            store.set('FOO', 'bar')

    def test_settings_split(self):
        store = ConfigStore()
        store.set('SATA_LINKPWR_ON_BAT', ' med_power_with_dipm   min_power ')
        store.set('EMPTY', '')

        assert store.settings('SATA_LINKPWR_ON_BAT') == ['med_power_with_dipm', 'min_power']
        assert store.settings('EMPTY') == []
        assert store.settings('MISSING') == []

    def test_serialize_roundtrips(self, tmp_path):
        store = ConfigStore()
        store.set('DISK_DEVICES', 'sda sdb')
        store.set('FOO', '')
        store.set('DISK_DEVICES', 'nvme0n1')

        assert store.serialize() == 'DISK_DEVICES="nvme0n1"\nFOO=""\n'

        snapshot = tmp_path / 'run' / 'run.conf'
        store.write_snapshot(snapshot)

        reloaded = ConfigStore.load([snapshot])

        assert reloaded.names() == store.names()
        assert reloaded.get('DISK_DEVICES') == 'nvme0n1'
        assert reloaded.get('FOO', 'x') == ''

    def test_snapshot_to_stdout(self, capsys):
        store = ConfigStore()
        store.set('FOO', 'bar')

        store.write_snapshot('-')

        assert capsys.readouterr().out == 'FOO="bar"\n'


class TestConfigSources:
    def test_precedence(self, sources):
        (sources.site_dir / '20-second.conf').write_text('DISK_IOSCHED=bfq\nSITE=2\n')
        (sources.site_dir / '10-first.conf').write_text('DISK_IOSCHED=none\nSITE=1\n')
        (sources.site_dir / 'README').write_text('DISK_IOSCHED=ignored\n')
        sources.user.write_text('DISK_DEVICES=sdc\n')

        store = ConfigStore.from_sources(sources)

        assert store.get('DISK_DEVICES') == 'sdc'
        assert store.get('DISK_IOSCHED') == 'bfq'
        assert store.get('SITE') == '2'
        assert store.names() == ['DISK_DEVICES', 'DISK_IOSCHED', 'SITE']

    def test_missing_site_dir_is_fine(self, sources):
        sources.site_dir.rmdir()

        store = ConfigStore.from_sources(sources)

        assert store.get('DISK_DEVICES') == 'sda sdb'

    def test_missing_defaults(self, sources):
        sources.defaults.unlink()

        with pytest.raises(MissingSourceError) as excinfo:
            ConfigStore.from_sources(sources)

        assert excinfo.value.code == ERR_DEFAULTS_MISSING

    def test_legacy_fallback(self, sources):
        sources.user.unlink()
        sources.legacy.write_text('DISK_DEVICES=sdz\n')

        store = ConfigStore.from_sources(sources)

        assert store.get('DISK_DEVICES') == 'sdz'

    def test_user_ignores_legacy_when_present(self, sources):
        sources.legacy.write_text('DISK_DEVICES=sdz\n')

        store = ConfigStore.from_sources(sources)

        assert store.get('DISK_DEVICES') == 'sda sdb'

    def test_missing_user_and_legacy(self, sources):
        sources.user.unlink()

        with pytest.raises(MissingSourceError) as excinfo:
            ConfigStore.from_sources(sources)

        assert excinfo.value.code == ERR_USER_MISSING
        assert ERR_USER_MISSING != ERR_DEFAULTS_MISSING

    def test_shipped_defaults_parse(self):
        store = ConfigStore.load([ConfigSources().defaults])

        assert store.settings('DISK_DEVICES') == ['nvme0n1', 'sda']
        assert store.get('SATA_LINKPWR_BLACKLIST', 'x') == ''
        assert store.get('AHCI_RUNTIME_PM_TIMEOUT') == '15'
