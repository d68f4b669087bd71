import uvicorn

from hireflow.main import build_app

app = build_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)
