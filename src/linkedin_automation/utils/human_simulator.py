"""
Human-like interaction simulator for browser automation.

Features:
- Per-character typing with variable delays (never instantaneous fills)
- Mouse movement with slight random offset before clicks
- Scroll steps that trigger lazy-loaded content

All waits go through a Pacer, so a Pacer.instant() makes every
interaction immediate in tests.
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from ..infrastructure.timing_evasion import Pacer

logger = logging.getLogger(__name__)


@dataclass
class HumanSimulatorConfig:
    """Configuration for human-like interaction simulation."""

    # Click configuration
    pre_click_delay_ms: int = 100
    max_click_offset_px: int = 3  # Random offset added to click position

    # Mouse movement configuration
    mouse_move_steps: int = 10
    mouse_move_jitter_px: int = 2


class HumanSimulator:
    """
    Simulates human-like interactions for browser automation.

    Usage:
        simulator = HumanSimulator(pacer)

        # Type one character at a time with human-like delays
        await simulator.type_text(page, "#username", "user@example.com")

        # Click with mouse movement
        await simulator.click_element(page, 'button[type="submit"]')
    """

    def __init__(self, pacer: Optional[Pacer] = None, config: Optional[HumanSimulatorConfig] = None):
        """
        Initialize the human simulator.

        Args:
            pacer: Delay source. Uses default pacing if not provided.
            config: Configuration options. Uses defaults if not provided.
        """
        self.pacer = pacer or Pacer()
        self.config = config or HumanSimulatorConfig()
        self._rng = random.Random()

    async def type_text(
        self,
        page,
        selector: str,
        text: str,
        clear_first: bool = True,
        mask_in_logs: bool = False,
    ) -> int:
        """
        Type text one character at a time with per-character pacing.

        Args:
            page: Playwright page object
            selector: CSS selector for the input element
            text: Text to type
            clear_first: Clear the field before typing
            mask_in_logs: Do not log the field contents

        Returns:
            Number of characters typed (0 if the element was not found)
        """
        element = await page.query_selector(selector)
        if not element:
            logger.warning(f"Element not found: {selector}")
            return 0

        if clear_first:
            await element.fill("")

        delays = self.pacer.keystroke_delays(text)
        for char, delay in zip(text, delays):
            await element.type(char)
            await self.pacer.sleep(delay)

        shown = "***" if mask_in_logs else f"{len(text)} chars"
        logger.debug(f"Typed {shown} into {selector}")
        return len(text)

    async def click_element(
        self,
        page,
        selector: str,
        move_mouse: bool = True,
    ) -> bool:
        """
        Click an element with human-like mouse movement.

        Args:
            page: Playwright page object
            selector: CSS selector for the element
            move_mouse: Whether to move mouse before clicking

        Returns:
            True if click was successful
        """
        element = await page.query_selector(selector)
        if not element:
            logger.warning(f"Element not found for click: {selector}")
            return False

        box = await element.bounding_box() if move_mouse and self.pacer.enabled else None
        if not box:
            await element.click()
            logger.debug(f"Clicked element: {selector}")
            return True

        # Calculate target position with slight random offset
        offset_x = self._rng.uniform(-self.config.max_click_offset_px, self.config.max_click_offset_px)
        offset_y = self._rng.uniform(-self.config.max_click_offset_px, self.config.max_click_offset_px)

        target_x = box['x'] + box['width'] / 2 + offset_x
        target_y = box['y'] + box['height'] / 2 + offset_y

        await self._move_mouse_to(page, target_x, target_y)
        await self.pacer.delay(self.config.pre_click_delay_ms * 0.5, self.config.pre_click_delay_ms * 1.5)
        await page.mouse.click(target_x, target_y)

        logger.debug(f"Clicked element: {selector}")
        return True

    async def _move_mouse_to(self, page, target_x: float, target_y: float) -> None:
        """Move mouse to target position in jittered steps."""
        # Start from viewport center; the real cursor position is unknown
        viewport = page.viewport_size
        start_x = viewport['width'] / 2 if viewport else 500
        start_y = viewport['height'] / 2 if viewport else 300

        steps = self.config.mouse_move_steps

        for i in range(1, steps + 1):
            progress = i / steps
            x = start_x + (target_x - start_x) * progress
            y = start_y + (target_y - start_y) * progress

            # Less jitter near the end for accuracy
            jitter_factor = 1 - progress
            jitter_x = self._rng.uniform(
                -self.config.mouse_move_jitter_px,
                self.config.mouse_move_jitter_px
            ) * jitter_factor
            jitter_y = self._rng.uniform(
                -self.config.mouse_move_jitter_px,
                self.config.mouse_move_jitter_px
            ) * jitter_factor

            await page.mouse.move(x + jitter_x, y + jitter_y)
            await self.pacer.delay(5, 15)

    async def scroll_to_fraction(self, page, fraction: float = 0.5) -> None:
        """
        Scroll to a fraction of the document height to trigger lazy loading.

        Args:
            page: Playwright page object
            fraction: 0.0 (top) to 1.0 (bottom)
        """
        fraction = min(max(fraction, 0.0), 1.0)
        await page.evaluate(
            "(fraction) => window.scrollTo(0, document.body.scrollHeight * fraction)",
            fraction,
        )
        logger.debug(f"Scrolled to {fraction:.0%} of document height")
