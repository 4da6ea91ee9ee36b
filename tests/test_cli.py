"""End-to-end tests for the artorio CLI: build images in tmp_path, run main()."""

import json
from pathlib import Path

import numpy as np
import pytest
from artorio.__main__ import main
from artorio.core.codec import decode, decode_game_string
from artorio.core.rules import RuleSet
from artorio.core.types import ColorRule, Command, PlacedItem
from artorio.registry import discover, get
from artorio.rulefile import read_rule_file, write_rule_file
from PIL import Image


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated cwd: a fake .git stops .env discovery, ARTORIO_* cleared."""
    (tmp_path / '.git').mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('ARTORIO_RULES', raising=False)
    monkeypatch.delenv('ARTORIO_ENVELOPE', raising=False)
    return tmp_path


@pytest.fixture
def image(workdir: Path) -> Path:
    """3x1 image: red, transparent red, blue."""
    arr = np.array([[[255, 0, 0, 255], [255, 0, 0, 0], [0, 0, 255, 255]]], dtype=np.uint8)
    path = workdir / 'art.png'
    Image.fromarray(arr).save(path)
    return path


class TestRegistry:
    def test_discovers_commands(self):
        assert {'convert', 'decode', 'rules'} <= set(discover())

    def test_every_entry_is_a_named_command(self):
        for name, cmd in discover().items():
            assert isinstance(cmd, Command)
            assert cmd.name == name

    def test_unknown_command(self):
        with pytest.raises(KeyError):
            get('nope')


class TestConvertCommand:
    def test_rule_args_to_stdout(self, image: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(['convert', str(image), '--rule', '#ff0000=red-wire', '-e', 'codec'])
        assert code == 0
        out, err = capsys.readouterr()
        doc = decode(out.strip())
        assert doc.items == (PlacedItem(0, 0, 'red-wire'), PlacedItem(1, 0, 'red-wire'))
        assert 'red-wire' in err

    def test_default_envelope_is_game(self, image: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(['convert', str(image), '--rule', '#0000ff=blue']) == 0
        out, _err = capsys.readouterr()
        assert out.startswith('0')
        assert decode_game_string(out).items == (PlacedItem(2, 0, 'blue'),)

    def test_output_file(self, image: Path, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        out_path = workdir / 'bp.txt'
        assert main(['convert', str(image), '--rule', '#ff0000=r', '-o', str(out_path), '-l', 'art']) == 0
        out, _err = capsys.readouterr()
        assert out == ''
        doc = decode_game_string(out_path.read_text())
        assert doc.label == 'art'

    def test_json(self, image: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(['convert', str(image), '--rule', '#000000-#ff00ff=any', '--json']) == 0
        parsed = json.loads(capsys.readouterr().out)
        assert parsed['entities'] == 3
        assert parsed['items'] == {'any': 3}
        assert parsed['bounds'] == [0, 0, 2, 0]
        assert decode_game_string(parsed['blueprint']).items[2] == PlacedItem(2, 0, 'any')

    def test_rule_file_from_env(self, image: Path, workdir: Path, monkeypatch, capsys) -> None:
        rules_path = workdir / 'my.bin'
        write_rule_file(rules_path, str(image), RuleSet([ColorRule.exact((0, 0, 255), 'blue')]))
        monkeypatch.setenv('ARTORIO_RULES', str(rules_path))
        assert main(['convert', str(image), '-e', 'codec']) == 0
        assert decode(capsys.readouterr().out).items == (PlacedItem(2, 0, 'blue'),)

    def test_default_cfg_bin_and_extra_rules(self, image: Path, workdir: Path, capsys) -> None:
        write_rule_file(workdir / 'cfg.bin', '', RuleSet([ColorRule.exact((0, 0, 255), 'blue')]))
        assert main(['convert', str(image), '-r', 'cfg.bin', '--rule', '#ff0000=red', '-e', 'codec']) == 0
        doc = decode(capsys.readouterr().out)
        assert [i.item_name for i in doc.items] == ['red', 'red', 'blue']

    def test_no_matches_exits_1(self, image: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(['convert', str(image), '--rule', '#00ff00=green']) == 1
        out, err = capsys.readouterr()
        assert out == ''
        assert 'Error:' in err

    def test_no_rules_exits_1(self, image: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(['convert', str(image)]) == 1
        assert 'No rules' in capsys.readouterr().err

    def test_invalid_rule_exits_1(self, image: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(['convert', str(image), '--rule', '#ffffff-#000000=bad']) == 1
        assert 'Error:' in capsys.readouterr().err

    def test_missing_image_exits_1(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(['convert', str(workdir / 'nope.png'), '--rule', '#ffffff=w']) == 1
        assert 'Cannot decode image' in capsys.readouterr().err

    def test_empty_rule_file_reports_no_matches(self, image: Path, workdir: Path, capsys) -> None:
        write_rule_file(workdir / 'r.bin', '', RuleSet([]))
        assert main(['convert', str(image), '-r', 'r.bin']) == 1
        err = capsys.readouterr().err
        assert 'No pixel matched' in err
        assert 'No rules' not in err

    def test_no_rules_names_default_path(self, image: Path, monkeypatch, capsys) -> None:
        monkeypatch.setenv('ARTORIO_RULES', 'elsewhere.bin')
        assert main(['convert', str(image)]) == 1
        assert 'elsewhere.bin not found' in capsys.readouterr().err

    def test_save_writes_rule_file(self, image: Path, workdir: Path, capsys) -> None:
        assert main(['convert', str(image), '--rule', '#0000ff=blue', '--rule', '#ff0000=red', '--save']) == 0
        assert 'saved 2 rule(s)' in capsys.readouterr().err
        image_path, rules = read_rule_file(workdir / 'cfg.bin')
        assert image_path == str(image)
        assert rules == RuleSet([ColorRule.exact((0, 0, 255), 'blue'), ColorRule.exact((255, 0, 0), 'red')])

    def test_save_to_named_rule_file(self, image: Path, workdir: Path, capsys) -> None:
        write_rule_file(workdir / 'r.bin', '', RuleSet([ColorRule.exact((0, 0, 255), 'blue')]))
        assert main(['convert', str(image), '-r', 'r.bin', '--rule', '#ff0000=red', '-s']) == 0
        image_path, rules = read_rule_file(workdir / 'r.bin')
        assert image_path == str(image)
        assert [r.item_name for r in rules] == ['blue', 'red']
        assert not (workdir / 'cfg.bin').exists()

    def test_image_from_rule_file(self, image: Path, workdir: Path, capsys) -> None:
        write_rule_file(workdir / 'cfg.bin', str(image), RuleSet([ColorRule.exact((0, 0, 255), 'blue')]))
        assert main(['convert', '-e', 'codec']) == 0
        assert decode(capsys.readouterr().out).items == (PlacedItem(2, 0, 'blue'),)

    def test_saved_run_repeats(self, image: Path, capsys) -> None:
        assert main(['convert', str(image), '--rule', '#ff0000=red', '--save', '-e', 'codec']) == 0
        first = capsys.readouterr().out
        assert main(['convert', '-e', 'codec']) == 0
        assert capsys.readouterr().out == first

    def test_no_image_anywhere(self, workdir: Path, capsys) -> None:
        assert main(['convert', '--rule', '#ff0000=red']) == 1
        assert 'No image given' in capsys.readouterr().err


class TestDecodeCommand:
    def test_decode_file(self, image: Path, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        out_path = workdir / 'bp.txt'
        main(['convert', str(image), '--rule', '#ff0000=r', '-o', str(out_path)])
        capsys.readouterr()
        assert main(['decode', str(out_path), '--json']) == 0
        parsed = json.loads(capsys.readouterr().out)
        assert parsed['items'] == {'r': 2}

    def test_decode_corrupt_string(self, capsys: pytest.CaptureFixture[str], workdir: Path) -> None:
        assert main(['decode', '0eJz!!!', '-e', 'game']) == 1
        assert 'Error:' in capsys.readouterr().err


class TestRulesCommand:
    def test_lists_rules(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        rules = RuleSet([ColorRule.exact((255, 255, 255), 'stone-wall'), ColorRule.range((0, 0, 0), (9, 9, 9), 'c')])
        write_rule_file(workdir / 'cfg.bin', 'logo.png', rules)
        assert main(['rules']) == 0
        out = capsys.readouterr().out
        assert '#ffffff' in out
        assert '#000000-#090909' in out
        assert out.index('stone-wall') < out.index('→ c')

    def test_missing_rule_file(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(['rules', 'missing.bin']) == 1


class TestHelp:
    def test_help_command(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(['help', 'convert']) == 0
        assert 'first rule' in capsys.readouterr().out

    def test_help_unknown(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(['help', 'nope']) == 1
