from __future__ import annotations

import logging

from . import locators
from .base import PageName, PageState, live, transition

logger = logging.getLogger(__name__)


class LoginPage(PageState):
    name = PageName.LOGIN
    landmark = locators.LOGIN_BUTTON

    @live
    def is_displayed(self) -> bool:
        visible = self.executor.is_visible(locators.LOGIN_BUTTON)
        logger.info(f"Login page visible: {visible}")
        return visible

    @transition(PageName.PRODUCTS)
    def submit(self, username: str, password: str) -> None:
        self.executor.type_text(locators.USERNAME, username)
        self.executor.type_text(locators.PASSWORD, password, secret=True)
        self.executor.click(locators.LOGIN_BUTTON)
        logger.info(f"Login attempt with username '{username}' and password [PROTECTED]")
