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

from datetime import datetime, timezone
from typing import Optional

from gdprconsent.consent import VendorConsent
from gdprconsent.utils.log import get_logger

logger = get_logger(__name__)


class GdprSwitch:
    """Time gate in front of vendor consent checks.

    Before the switch date every vendor is allowed, after it a consent record is required and decides.
    """

    def __init__(self, switch_date: Optional[datetime] = None) -> None:
        if switch_date is None:
            from gdprconsent.conf import get_global_settings
            switch_date = get_global_settings().GDPR_SWITCH_DATE
        if switch_date.tzinfo is None:
            raise ValueError('switch_date must be timezone aware')
        self.log = logger.new(switch_date=switch_date.isoformat())
        self.switch_date = switch_date

    def is_on(self, now: Optional[datetime] = None) -> bool:
        if now is None:
            now = datetime.now(timezone.utc)
        return now > self.switch_date

    def is_vendor_allowed(self, consent: Optional[VendorConsent], vendor_id: int,
                          now: Optional[datetime] = None) -> bool:
        if not self.is_on(now):
            return True
        if consent is None:
            self.log.debug('no consent given after switch date', vendor_id=vendor_id)
            return False
        return consent.is_vendor_allowed(vendor_id)
