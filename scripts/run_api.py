#!/usr/bin/env python3
"""
FastAPIサーバーを起動するエントリポイント
"""
import os
import sys
from pathlib import Path

# プロジェクトルートをPYTHONPATHに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=os.environ.get("CARTCHAIN_HOST", "127.0.0.1"),
        port=int(os.environ.get("CARTCHAIN_PORT", "8000")),
        reload=os.environ.get("CARTCHAIN_RELOAD", "1") == "1",  # 開発時の自動リロード
    )
