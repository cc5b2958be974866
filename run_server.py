#!/usr/bin/env python
"""
ルールエンジン 開発サーバ起動スクリプト
"""

import argparse
import logging
import os
import sys

# プロジェクトルートをパスに追加
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

# appを直接インポート
from src.api.main import app
import uvicorn


def main():
    parser = argparse.ArgumentParser(description="ルールエンジン APIサーバ")
    parser.add_argument("--host", default=os.environ.get("BOARDRULES_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("BOARDRULES_PORT", "8001")))
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    print("=" * 60)
    print("ルールエンジン 開発サーバを起動します")
    print("=" * 60)
    print(f"APIサーバ: http://localhost:{args.port}")
    print(f"API ドキュメント: http://localhost:{args.port}/docs")
    print("=" * 60)
    print()

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        reload=False,
        log_level=args.log_level
    )


if __name__ == "__main__":
    main()
