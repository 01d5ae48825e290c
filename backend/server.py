import os
import uvicorn

if __name__ == "__main__":
    # 設定の読み込みと環境変数のセットアップ
    # ロガーがログディレクトリを参照する前に行う
    from config import settings
    settings.setup_environment()

    # アプリケーションデータディレクトリの確保
    os.makedirs(settings.USER_DATA_DIR, exist_ok=True)

    # mainモジュールからappオブジェクトを直接インポート
    from main import app

    port = int(os.environ.get("PORT", settings.PORT))

    print(f"Starting Song Catalog Server on {settings.HOST}:{port}...")
    print(f"User Data Directory: {settings.USER_DATA_DIR}")
    print(f"External API: {settings.EXTERNAL_API_URL or '(not set, fallback data will be used)'}")

    uvicorn.run(app, host=settings.HOST, port=port, reload=False, workers=1)
