#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

import json
from pathlib import Path
from typing import get_type_hints
from unittest.mock import patch

import pytest

from gdprconsent.cli import check_purpose, check_vendor, decode, encode
from gdprconsent.cli.main import CliManager, main
from gdprconsent.cli.util import (
    LoggingOptions,
    LoggingOutput,
    process_logging_options,
    process_logging_output,
    setup_logging,
)
from gdprconsent.consent import VendorConsent

RANGE_CONSENT_STRING = 'BN5lERiOMYEdiAKAWXEND1HoSBE6CAFAApAMgBkIDIgM0AgOJxAnQA=='
BITMAP_CONSENT_STRING = 'BOEB7cAOEB7cAAHABDFRAI4AAAAAUoA'
DEFAULT_TRUE_RANGE_CONSENT_STRING = 'BOEB7cAOEB7cAAHABDENAI4AAAACjACgAUACgAHg'


def _fixture(filename: str) -> str:
    return str(Path(__file__).parent / 'fixtures' / filename)


def _run(module, argv):
    args = module.create_parser().parse_args(argv)
    return module.execute(args)


def test_decode(capsys):
    assert _run(decode, [BITMAP_CONSENT_STRING]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data['consent_language'] == 'FR'
    assert data['allowed_vendor_ids'] == [2, 4]
    assert 'binary' not in data


def test_decode_binary(capsys):
    assert _run(decode, [BITMAP_CONSENT_STRING, '--binary']) == 0

    data = json.loads(capsys.readouterr().out)
    assert data['binary'].startswith('000001')
    assert len(data['binary']) == 184


def test_decode_invalid(capsys):
    assert _run(decode, ['not+base64']) == 2

    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err.startswith('Error: ')


def test_check_vendor(capsys):
    assert _run(check_vendor, [RANGE_CONSENT_STRING, '225', '515']) == 0
    assert capsys.readouterr().out.splitlines() == ['vendor 225: allowed', 'vendor 515: allowed']

    assert _run(check_vendor, [RANGE_CONSENT_STRING, '225', '411']) == 1
    assert capsys.readouterr().out.splitlines() == ['vendor 225: allowed', 'vendor 411: denied']


def test_check_purpose(capsys):
    assert _run(check_purpose, [BITMAP_CONSENT_STRING, '1', '2']) == 0
    assert capsys.readouterr().out.splitlines() == ['purpose 1: allowed', 'purpose 2: allowed']

    assert _run(check_purpose, [BITMAP_CONSENT_STRING, '3', '4', '25']) == 1
    assert capsys.readouterr().out.splitlines() == ['purpose 3: allowed', 'purpose 4: denied', 'purpose 25: denied']


def test_check_missing_consent(capsys):
    assert _run(check_vendor, ['', '1']) == 2
    assert 'empty' in capsys.readouterr().err


def test_encode_yaml(capsys):
    assert _run(encode, [_fixture('bitmap_consent.yml')]) == 0
    assert capsys.readouterr().out.strip() == BITMAP_CONSENT_STRING

    assert _run(encode, [_fixture('bitmap_consent.yml'), '--padded']) == 0
    assert capsys.readouterr().out.strip() == BITMAP_CONSENT_STRING + '='


def test_encode_json(capsys):
    assert _run(encode, [_fixture('range_consent.json')]) == 0
    assert capsys.readouterr().out.strip() == DEFAULT_TRUE_RANGE_CONSENT_STRING


def test_encode_unknown_field(capsys):
    assert _run(encode, [_fixture('unknown_field_consent.yml')]) == 2
    assert 'color' in capsys.readouterr().err


def test_encode_missing_file(capsys):
    assert _run(encode, [_fixture('missing.yml')]) == 2
    assert 'is not a file' in capsys.readouterr().err


def test_encode_decoded_output_round_trip():
    decoded = VendorConsent.from_base64_string(RANGE_CONSENT_STRING).to_json_dict()
    consent_data = json.loads(json.dumps(decoded))
    consent = encode.builder_from_dict(consent_data).build()

    assert consent.to_base64_string() == RANGE_CONSENT_STRING.rstrip('=')


def test_process_logging_arguments():
    argv = ['gdpr-consent decode', '--json-logs', '--debug', BITMAP_CONSENT_STRING]

    assert process_logging_output(argv) == LoggingOutput.JSON
    assert process_logging_options(argv) == LoggingOptions(debug=True)
    assert argv == ['gdpr-consent decode', BITMAP_CONSENT_STRING]

    argv = ['gdpr-consent decode', BITMAP_CONSENT_STRING]
    assert process_logging_output(argv) == LoggingOutput.PRETTY
    assert process_logging_options(argv) == LoggingOptions(debug=False)


def test_cli_manager_help(capsys):
    with patch('sys.argv', ['gdpr-consent']):
        assert CliManager().execute_from_command_line() == 0

    output = capsys.readouterr().out
    for cmd in ('decode', 'encode', 'check_vendor', 'check_purpose'):
        assert cmd in output


def test_cli_manager_unknown_command(capsys):
    with patch('sys.argv', ['gdpr-consent', 'unknown']):
        assert CliManager().execute_from_command_line() == -1

    assert 'Unknown command: "unknown"' in capsys.readouterr().out


@pytest.mark.parametrize(['vendor_id', 'exit_code'], [('225', 0), ('411', 1)])
def test_cli_manager_dispatch(capsys, vendor_id, exit_code):
    argv = ['gdpr-consent', 'check_vendor', '--disable-logs', RANGE_CONSENT_STRING, vendor_id]
    with patch('sys.argv', argv):
        assert CliManager().execute_from_command_line() == exit_code

    assert capsys.readouterr().out.startswith(f'vendor {vendor_id}: ')


@pytest.mark.parametrize(['filename', 'message'], [
    ('malformed_range_entry_consent.yml', 'range entry must be a [min, max] pair, got 30'),
    ('float_range_entry_consent.yml', 'range entry ids must be integers'),
])
def test_encode_invalid_range_entries(capsys, filename, message):
    assert _run(encode, [_fixture(filename)]) == 2

    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err.startswith('Error: ')
    assert message in captured.err


@pytest.fixture
def null_logging_after():
    yield
    setup_logging(logging_output=LoggingOutput.NULL, logging_options=LoggingOptions(debug=False))


def test_main_encode_with_debug_logs(capsys, null_logging_after):
    argv = ['gdpr-consent', 'encode', '--debug', _fixture('bitmap_consent.yml')]
    with patch('sys.argv', argv), pytest.raises(SystemExit) as e:
        main()

    assert e.value.code == 0
    captured = capsys.readouterr()
    # stdout holds only the consent string, debug logs go to stderr
    assert captured.out == BITMAP_CONSENT_STRING + '\n'
    assert 'consent record serialized' in captured.err


def test_main_decode(capsys, null_logging_after):
    with patch('sys.argv', ['gdpr-consent', 'decode', '--debug', RANGE_CONSENT_STRING]), pytest.raises(SystemExit) as e:
        main()

    assert e.value.code == 0
    data = json.loads(capsys.readouterr().out)
    assert data['vendor_encoding_type'] == 'range'
    assert data['max_vendor_id'] == 5024


def test_main_uncaught_exception(capsys, null_logging_after):
    with patch('sys.argv', ['gdpr-consent', 'decode', BITMAP_CONSENT_STRING]), \
            patch('gdprconsent.cli.decode.execute', side_effect=RuntimeError('boom')), \
            pytest.raises(SystemExit) as e:
        main()

    assert e.value.code == 2
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'boom' in captured.err


def test_main_return_annotation():
    assert get_type_hints(main) == {'return': type(None)}
