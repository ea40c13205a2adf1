"""users パッケージの例外型定義"""

from __future__ import annotations


class UserError(Exception):
    """users パッケージのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class UserErrorCodes:
    """UserError のエラーコード定数。"""

    INVALID_INPUT: str = "INVALID_INPUT"
    NOT_FOUND: str = "USER_NOT_FOUND"
    DUPLICATE_EMAIL: str = "DUPLICATE_EMAIL"
