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

from datetime import datetime, timedelta, timezone

import pytest

from gdprconsent.consent import VendorConsent
from gdprconsent.switch import GdprSwitch

CONSENT_STRING = 'BN5lERiOMYEdiAKAWXEND1HoSBE6CAFAApAMgBkIDIgM0AgOJxAnQA=='

PAST = datetime.fromisoformat('2017-05-25T00:00:00+02:00')
FUTURE = datetime.fromisoformat('2078-05-25T00:00:00+02:00')


@pytest.fixture
def consent() -> VendorConsent:
    return VendorConsent.from_base64_string(CONSENT_STRING)


def test_switched_on_when_date_in_past():
    assert GdprSwitch(PAST).is_on()


def test_switched_off_when_date_in_future():
    assert not GdprSwitch(FUTURE).is_on()


def test_switch_date_is_exclusive():
    switch = GdprSwitch(PAST)
    assert not switch.is_on(PAST)
    assert switch.is_on(PAST + timedelta(microseconds=1))
    assert not switch.is_on(PAST - timedelta(days=1))


def test_default_switch_date():
    switch = GdprSwitch()
    assert switch.switch_date == datetime(2018, 5, 24, 22, tzinfo=timezone.utc)
    assert switch.is_on()


def test_naive_switch_date():
    with pytest.raises(ValueError):
        GdprSwitch(datetime(2018, 5, 25))


def test_vendor_allowed_when_switch_is_off(consent):
    switch = GdprSwitch(FUTURE)
    assert consent.is_vendor_allowed(225)
    assert not consent.is_vendor_allowed(411)
    assert switch.is_vendor_allowed(consent, 225)
    assert switch.is_vendor_allowed(consent, 411)
    assert switch.is_vendor_allowed(None, 225)


def test_vendor_allowed_when_switch_is_on(consent):
    switch = GdprSwitch(PAST)
    assert switch.is_vendor_allowed(consent, 225)


def test_vendor_not_allowed_when_consent_not_provided():
    switch = GdprSwitch(PAST)
    assert not switch.is_vendor_allowed(None, 225)


def test_vendor_not_allowed_when_consent_provided_but_vendor_not_allowed(consent):
    switch = GdprSwitch(PAST)
    assert not switch.is_vendor_allowed(consent, 411)


def test_explicit_now(consent):
    switch = GdprSwitch()
    before = datetime(2018, 1, 1, tzinfo=timezone.utc)
    after = datetime(2019, 1, 1, tzinfo=timezone.utc)
    assert switch.is_vendor_allowed(None, 411, now=before)
    assert not switch.is_vendor_allowed(None, 411, now=after)
    assert not switch.is_vendor_allowed(consent, 411, now=after)
