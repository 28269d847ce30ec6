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
Browser page signal source.

Runs a read-only probe script inside a Playwright page and turns the
navigator, screen and timezone properties it reports into a signal
payload. Any object with an awaitable ``evaluate(expression)`` method is
accepted, so Playwright itself stays an optional dependency.

Example:
    >>> from playwright.async_api import async_playwright
    >>> async with async_playwright() as p:
    ...     browser = await p.chromium.launch()
    ...     page = await browser.new_page()
    ...     await page.goto("https://example.com")
    ...     client = await signalguard.init(config, source=PageSignalSource(page))
    ...     payload = await client.get()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from signalguard.exceptions import CollectionError
from signalguard.signals.base import CollectionContext, SignalPayload, SignalSource, build_payload

if TYPE_CHECKING:
    from playwright.async_api import Page


PROBE_SCRIPT = """
() => {
    const nav = window.navigator;
    const scr = window.screen;
    let timeZone = "";
    try {
        timeZone = Intl.DateTimeFormat().resolvedOptions().timeZone || "";
    } catch (e) {}
    return {
        navigator: {
            userAgent: nav.userAgent,
            platform: nav.platform,
            language: nav.language,
            languages: Array.from(nav.languages || []),
            hardwareConcurrency: nav.hardwareConcurrency || 0,
            deviceMemory: nav.deviceMemory || 0,
            maxTouchPoints: nav.maxTouchPoints || 0,
            cookieEnabled: nav.cookieEnabled,
            doNotTrack: nav.doNotTrack,
            webdriver: !!nav.webdriver,
            pluginCount: nav.plugins ? nav.plugins.length : 0,
        },
        screen: {
            width: scr.width,
            height: scr.height,
            availWidth: scr.availWidth,
            availHeight: scr.availHeight,
            colorDepth: scr.colorDepth,
            pixelRatio: window.devicePixelRatio || 1,
        },
        timezone: {
            name: timeZone,
            offset: new Date().getTimezoneOffset(),
        },
    };
}
"""


class PageSignalSource(SignalSource):
    """Signal source that probes a live browser page."""

    platform = "web"

    def __init__(self, page: "Page") -> None:
        self._page = page

    async def collect(self, context: CollectionContext) -> SignalPayload:
        result = await self._page.evaluate(PROBE_SCRIPT)
        if not isinstance(result, dict) or "navigator" not in result:
            raise CollectionError(f"Page probe returned unexpected result: {type(result).__name__}")

        components: Dict[str, Any] = {
            "navigator": result.get("navigator") or {},
            "screen": result.get("screen") or {},
        }
        timezone = result.get("timezone") or {"name": "", "offset": 0}
        return build_payload(context, components, timezone, self.platform)
