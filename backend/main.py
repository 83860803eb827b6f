import os
import logging
import uvicorn

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

if os.environ.get("DEBUG", "0") == "1":
    logging.getLogger().setLevel(logging.DEBUG)

from api import create_app
from config import get_config

config = get_config()
app = create_app()

if __name__ == "__main__":
    logger.info(f"Starting Quietcut on {config.host}:{config.port}")
    logger.info(f"Engine: {config.ffmpeg_binary} / {config.ffprobe_binary}")
    logger.info(
        f"Delivery: {config.output_format} at {config.output_bitrate}, "
        f"{config.output_sample_rate} Hz, scratch root {config.temp_dir}"
    )
    logger.info(
        f"Silence defaults: {config.default_threshold}dB, "
        f"min {config.default_detection_duration}s, truncate to {config.default_truncate_to}s; "
        f"render workers: {config.render_workers}"
    )
    uvicorn.run(app, host=config.host, port=config.port)
