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

import os

from gdprconsent.cli.util import LoggingOptions, LoggingOutput, setup_logging
from gdprconsent.conf import UNITTESTS_SETTINGS_FILEPATH

os.environ['GDPR_CONFIG_YAML'] = os.environ.get('GDPR_TEST_CONFIG_YAML', UNITTESTS_SETTINGS_FILEPATH)

setup_logging(logging_output=LoggingOutput.NULL, logging_options=LoggingOptions(debug=False))
