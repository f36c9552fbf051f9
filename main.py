import uvicorn
from dotenv import load_dotenv

from transactions_api.config import get_config

load_dotenv()


if __name__ == "__main__":
    config = get_config()
    print(f"Server running on port {config.server.port}")
    uvicorn.run("transactions_api.api:app", host=config.server.host, port=config.server.port)
