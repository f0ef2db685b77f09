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

from pathlib import Path

import pytest
from pydantic import ValidationError

from gdprconsent.vendor import Feature, Purpose, Vendor, VendorList


def _get_absolute_filepath(filepath: str) -> Path:
    parent_dir = Path(__file__).parent

    return parent_dir / filepath


@pytest.fixture
def vendor_list() -> VendorList:
    return VendorList.from_json(_get_absolute_filepath('fixtures/vendorlist.json').read_bytes())


def test_vendor_list_header(vendor_list):
    assert vendor_list.vendor_list_version == 215
    assert vendor_list.last_updated == '2020-06-25T16:00:22Z'
    assert len(vendor_list.purposes) == 2
    assert len(vendor_list.features) == 1
    assert len(vendor_list.vendors) == 2


def test_get_vendor(vendor_list):
    vendor = vendor_list.get_vendor(8)
    assert vendor == Vendor(
        id=8,
        name='Emerse Sverige AB',
        purpose_ids=[1, 2],
        leg_int_purpose_ids=[],
        feature_ids=[1],
        policy_url='https://www.emerse.com/privacy-policy/',
    )
    assert not vendor.is_deleted
    assert vendor_list.get_vendor(9) is None


def test_deleted_vendor_keeps_unknown_keys(vendor_list):
    vendor = vendor_list.get_vendor(12)
    assert vendor is not None
    assert vendor.is_deleted
    assert vendor.deleted_date == '2019-08-28T00:00:00Z'
    assert vendor.leg_int_purpose_ids == [2]
    assert vendor.model_extra == {'cookieMaxAgeSeconds': 31536000}


def test_get_purpose_and_feature(vendor_list):
    assert vendor_list.get_purpose(1) == Purpose(
        id=1,
        name='Information storage and access',
        description='The storage of information, or access to information that is already stored, on your device.',
    )
    assert vendor_list.get_purpose(3) is None
    feature = vendor_list.get_feature(1)
    assert isinstance(feature, Feature)
    assert feature.name == 'Matching Data to Offline Sources'
    assert vendor_list.get_feature(2) is None


def test_empty_vendor_list():
    vendor_list = VendorList.from_json('{}')
    assert vendor_list.vendor_list_version == 0
    assert vendor_list.last_updated == ''
    assert vendor_list.vendors == []


def test_invalid_vendor_list():
    with pytest.raises(ValidationError):
        VendorList.from_json('{"vendors": [{"id": "not a number"}]}')


def test_to_json_uses_camel_case_keys(vendor_list):
    again = VendorList.from_json(vendor_list.to_json())
    assert again == vendor_list
    assert b'"policyUrl"' in vendor_list.to_json()
