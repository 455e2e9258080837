"""fur - Finite User Repository 包管理客户端"""

__version__ = "0.3.0"
