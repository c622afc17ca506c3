import os

import uvicorn

from rtxconf.api.main import create_app

if __name__ == "__main__":
    host = os.getenv("RTXCONF_HOST", "127.0.0.1")
    port = int(os.getenv("RTXCONF_PORT", "8001"))
    uvicorn.run(create_app(), host=host, port=port)
