"""
外部 API (/info) のモックサーバー。

ローカル開発時に EXTERNAL_API_URL=http://127.0.0.1:8081 として起動しておくと、
楽曲登録時に固定の歌詞・リリース日が補完される。テストでも使用する。

    python dev/mock_api.py --port 8081
"""
import argparse
import logging
from aiohttp import web

logger = logging.getLogger(__name__)

MOCK_SONG_INFO = {
    "release_date": "2006-07-16",
    "text": "Ooh baby, don't you know I suffer?\nOoh baby, can you hear me moan?\n\n"
            "You caught me under false pretenses\nHow long before you let me go?",
    "link": "https://www.youtube.com/watch?v=Xsp3_a-PMTw",
}

async def handle_info(request: web.Request) -> web.Response:
    logger.info(f"Received request: {request.rel_url}")
    group = request.query.get("group", "")
    title = request.query.get("title", "")
    if not group or not title:
        logger.info("Missing group or title")
        return web.json_response({"error": "Missing group or title"}, status=400)

    logger.info(f"Response sent for group={group}, title={title}")
    return web.json_response(MOCK_SONG_INFO)

def create_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/info", handle_info)
    return app

def main():
    parser = argparse.ArgumentParser(description="Mock song info API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8081)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    logger.info(f"Starting mock API on {args.host}:{args.port}")
    web.run_app(create_app(), host=args.host, port=args.port)

if __name__ == "__main__":
    main()
