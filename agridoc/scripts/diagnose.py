"""Command line diagnosis of crop photos.

Steps:
1. Instantiate the model client & mapper via Hydra.
2. For each image path, run the diagnosis pipeline.
3. Print each rendered view as plain text or HTML.
"""

import asyncio

import hydra
from dotenv import load_dotenv
from hydra.utils import instantiate
from loguru import logger
from omegaconf import DictConfig, OmegaConf
from tqdm import tqdm

from agridoc.clients.base import BaseModelClient
from agridoc.inference import diagnose_file
from agridoc.mapper.base import BaseMapper
from agridoc.results.outcome import Failure, PipelineOutcome
from agridoc.results.presenter import present
from agridoc.utils.hydra import ensure_required_keys, resolve_diagnose_options


async def _diagnose_all(paths: list[str], note: str, client: BaseModelClient, mapper: BaseMapper) -> list[PipelineOutcome]:
    outcomes = []
    for path in tqdm(paths, desc="Diagnosing", disable=len(paths) < 2):
        outcomes.append(await diagnose_file(path, note, client, mapper))
    return outcomes


@hydra.main(version_base=None, config_path="../../configs", config_name="diagnose")
def main(config: DictConfig) -> None:
    """Diagnose script entry point."""
    ensure_required_keys(config, "model", "mapper", "diagnose")
    load_dotenv(override=True)
    logger.info("Environment variables loaded (dotenv)")
    logger.debug(f"Configuration:\n{OmegaConf.to_yaml(config)}")

    paths, note, output = resolve_diagnose_options(config)
    if not paths:
        logger.warning("No images given; set diagnose.images=[...]")
        return

    client: BaseModelClient = instantiate(config.model)
    mapper: BaseMapper = instantiate(config.mapper)

    outcomes = asyncio.run(_diagnose_all(paths, note, client, mapper))
    for path, outcome in zip(paths, outcomes):
        view = present(outcome)
        print(f"=== {path} ===")
        print(view.to_html() if output == "html" else view.to_text())
        print()

    failed = sum(isinstance(o, Failure) for o in outcomes)
    logger.info(f"Diagnosed {len(outcomes)} image(s), {failed} failed")


if __name__ == "__main__":  # pragma: no cover
    # pylint: disable=no-value-for-parameter
    main()
