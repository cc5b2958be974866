"""
ルールエンジンの HTTP API
"""
