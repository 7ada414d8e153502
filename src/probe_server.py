import logging

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import ORJSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from config.config import Config
from config.logging_config import setup_logging
from contracts.errors import InvalidProbeJobError, ProbeJobError
from core.irc_check import IrcLivenessCheck
from core.metrics import record_outcome
from core.probe import Probe
from core.probe_job import parse_probe_job, run_probe_job

# Set up logging at the start of the module
setup_logging()
logger = logging.getLogger(__name__)

config = Config.from_env()
prober = Probe(IrcLivenessCheck(nick=config.irc_nick), timeout=config.probe_timeout_seconds)

app = FastAPI(default_response_class=ORJSONResponse)


@app.post("/probe")
async def probe_job(request: Request):
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    try:
        endpoint = parse_probe_job(payload)
    except InvalidProbeJobError as e:
        logger.warning(f"Rejected probe job {payload!r}: {e}")
        return ORJSONResponse({"detail": str(e)}, status_code=400)

    logger.info(f"Probe job received for {endpoint}")
    try:
        message = await run_probe_job(endpoint, prober)
    except ProbeJobError as e:
        record_outcome(failed=True)
        return ORJSONResponse(
            {"detail": str(e), "infrastructure": e.infrastructure}, status_code=502
        )
    record_outcome(failed=False)
    return {"status": "ok", "message": message}


@app.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def main():
    uvicorn.run(app, host=config.worker_host, port=config.worker_port, log_config=None)


logger.info("Probe worker module loaded and logging is configured.")

if __name__ == "__main__":
    main()
