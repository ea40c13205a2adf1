"""orderflow: ユーザー検証付き注文作成サービス。"""

__version__ = "0.1.0"
