"""
Flask Chat UI for the SmartShop shopping-list assistant.

Run with: uv run chat_app.py
"""

from dotenv import load_dotenv

from smartshop.core.config import load_config
from smartshop.core.logging import configure_logging
from smartshop.web.app import create_app

load_dotenv()


def main():
    config = load_config()
    configure_logging(config)
    app = create_app(config)

    print("\n🛒 Smart Shop Chat")
    print("=" * 40)
    print(f"Open http://localhost:{config.app.port} in your browser")
    print("Make sure OPENAI_API_KEY and AUTH_SECRET are set (.env works)")
    print("=" * 40 + "\n")
    # threaded: SSE streams hold a request thread each
    app.run(host=config.app.host, port=config.app.port, debug=config.app.debug, threaded=True)


if __name__ == "__main__":
    main()
