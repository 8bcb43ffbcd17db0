from fastapi import FastAPI

app = FastAPI(title="Sample")


@app.get("/")
def index():
    return {"sample": True}
