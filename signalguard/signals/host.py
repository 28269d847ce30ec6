# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Host signal source.

Collects device signals from the machine the agent runs on: operating
system, architecture, interpreter, CPU count, locale and timezone. The
hostname is hashed before it leaves the probe.

Probing touches blocking OS APIs, so it runs in the event loop's default
executor and never blocks the caller.
"""

from __future__ import annotations

import asyncio
import hashlib
import locale
import os
import platform
import socket
import time
from typing import Any, Dict, Tuple

from signalguard.signals.base import CollectionContext, SignalPayload, SignalSource, build_payload


def _timezone_info() -> Dict[str, Any]:
    is_dst = time.localtime().tm_isdst > 0
    offset_seconds = time.altzone if is_dst and time.daylight else time.timezone
    return {
        "name": time.tzname[1 if is_dst else 0],
        # Minutes west of UTC, same sign as Date.getTimezoneOffset()
        "offset": offset_seconds // 60,
    }


def _host_components() -> Dict[str, Any]:
    lang, encoding = locale.getlocale()
    hostname = socket.gethostname()
    return {
        "os": platform.system(),
        "osRelease": platform.release(),
        "arch": platform.machine(),
        "runtime": platform.python_implementation(),
        "runtimeVersion": platform.python_version(),
        "cpuCount": os.cpu_count() or 0,
        "language": lang or "",
        "encoding": encoding or "",
        "hostHash": hashlib.sha256(hostname.encode()).hexdigest()[:16],
    }


class HostSignalSource(SignalSource):
    """Signal source backed by the local host environment."""

    platform = "host"

    def _probe(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        return _host_components(), _timezone_info()

    async def collect(self, context: CollectionContext) -> SignalPayload:
        loop = asyncio.get_running_loop()
        components, tz = await loop.run_in_executor(None, self._probe)
        return build_payload(context, components, tz, self.platform)
