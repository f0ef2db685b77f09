# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import sys
from argparse import ArgumentParser, Namespace
from typing import Any

from pydantic import AwareDatetime, TypeAdapter, ValidationError

from gdprconsent.builder import VendorConsentBuilder
from gdprconsent.consent import RangeEntry, VendorEncodingType

_DATETIME_ADAPTER: TypeAdapter[AwareDatetime] = TypeAdapter(AwareDatetime)


def create_parser() -> ArgumentParser:
    from gdprconsent.cli.util import create_parser
    parser = create_parser()
    parser.add_argument('fields_file', type=str, help='YAML or JSON file with the consent fields, as printed by decode')
    parser.add_argument('--padded', action='store_true', help='Pad the consent string with "="')
    return parser


def _range_entry(item: Any) -> RangeEntry:
    if not isinstance(item, (list, tuple)) or len(item) != 2:
        raise ValueError(f'range entry must be a [min, max] pair, got {item!r}')
    return RangeEntry(item[0], item[1])


def builder_from_dict(data: dict[str, Any]) -> VendorConsentBuilder:
    """Create a builder from a dict shaped like `VendorConsent.to_json_dict()`.

    `created` is required, `last_updated` defaults to it.
    """
    data = dict(data)
    builder = VendorConsentBuilder()

    created = _DATETIME_ADAPTER.validate_python(data.pop('created'))
    builder.set_created(created)
    builder.set_last_updated(_DATETIME_ADAPTER.validate_python(data.pop('last_updated', created)))

    if 'version' in data:
        builder.set_version(data.pop('version'))
    builder.set_cmp_id(data.pop('cmp_id', 0))
    builder.set_cmp_version(data.pop('cmp_version', 0))
    builder.set_consent_screen(data.pop('consent_screen', 0))
    builder.set_consent_language(data.pop('consent_language', ''))
    builder.set_vendor_list_version(data.pop('vendor_list_version', 0))
    builder.set_max_vendor_id(data.pop('max_vendor_id', 0))
    builder.set_allowed_purposes(data.pop('allowed_purposes', []))

    encoding_type = data.pop('vendor_encoding_type', None)
    if encoding_type is not None:
        builder.set_vendor_encoding_type(VendorEncodingType[str(encoding_type).upper()])
    if 'allowed_vendor_ids' in data:
        builder.set_allowed_vendor_ids(data.pop('allowed_vendor_ids'))
    if 'range_entries' in data:
        range_entries = data.pop('range_entries')
        if not isinstance(range_entries, list):
            raise ValueError(f'range_entries must be a list of [min, max] pairs, got {range_entries!r}')
        builder.set_range_entries(_range_entry(item) for item in range_entries)
    if 'default_consent' in data:
        builder.set_default_consent(bool(data.pop('default_consent')))
    if 'num_entries' in data:
        builder.set_num_entries(data.pop('num_entries'))

    # Read-only values printed by decode
    data.pop('binary', None)

    if data:
        raise ValueError('unknown fields: {}'.format(', '.join(sorted(data))))
    return builder


def execute(args: Namespace) -> int:
    from gdprconsent.encoding import PaddingMode
    from gdprconsent.exception import GdprError
    from gdprconsent.utils.yaml import read_mapping

    try:
        data = read_mapping(filepath=args.fields_file)
        consent = builder_from_dict(data).build()
    except (GdprError, ValidationError, ValueError, KeyError) as e:
        print('Error: {}'.format(e), file=sys.stderr)
        return 2

    # Without --padded the BASE64_PADDING setting decides
    padding = PaddingMode.PADDED if args.padded else None
    print(consent.to_base64_string(padding))
    return 0


def main() -> int:
    parser = create_parser()
    args = parser.parse_args()
    return execute(args)
