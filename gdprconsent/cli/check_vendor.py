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


def create_parser() -> ArgumentParser:
    from gdprconsent.cli.util import create_parser
    parser = create_parser()
    parser.add_argument('consent_string', type=str, help='Consent string in url-safe base64, padded or not')
    parser.add_argument('vendor_ids', type=int, nargs='+', help='Vendor ids to check')
    return parser


def execute(args: Namespace) -> int:
    """Print the consent status of each vendor, returns 1 when any of them is denied."""
    from gdprconsent.consent import VendorConsent
    from gdprconsent.exception import GdprError

    try:
        consent = VendorConsent.from_base64_string(args.consent_string)
    except GdprError as e:
        print('Error: {}'.format(e), file=sys.stderr)
        return 2

    for vendor_id in args.vendor_ids:
        status = 'allowed' if consent.is_vendor_allowed(vendor_id) else 'denied'
        print('vendor {}: {}'.format(vendor_id, status))

    return 0 if consent.are_vendors_allowed(args.vendor_ids) else 1


def main() -> int:
    parser = create_parser()
    args = parser.parse_args()
    return execute(args)
