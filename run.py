import os

import uvicorn

from pctcup.extensions import db
from pctcup import models  # noqa: F401  (register tables)

if __name__ == "__main__":
    db.create_all()
    uvicorn.run(
        "pctcup.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "3001")),
        reload=bool(os.getenv("RELOAD")),
    )
