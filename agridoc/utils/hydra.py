from loguru import logger
from omegaconf import DictConfig, OmegaConf

OUTPUT_FORMATS = ("text", "html")


def ensure_required_keys(cfg: DictConfig, *required_keys: str) -> None:
    """Validate that cfg contains all required (dotted) keys.

    Example:
        ensure_required_keys(cfg, "model", "diagnose.images")

    Raises KeyError naming the first missing key.
    """
    for key in required_keys:
        node = OmegaConf.select(cfg, key)
        if node is None:
            raise KeyError(key)
    logger.info(f'Validating config: keys "{", ".join(required_keys)}" are present.')


def resolve_diagnose_options(cfg: DictConfig) -> tuple[list[str], str, str]:
    """Read the ``diagnose`` group: image paths, note and output format.

    A single path given as a scalar is accepted as a one-item list; a null
    note becomes "". Raises ValueError for an unknown output format.
    """
    ensure_required_keys(cfg, "diagnose")
    diagnose = cfg.diagnose
    images = diagnose.get("images") or []
    if isinstance(images, str):
        images = [images]
    paths = [str(p) for p in images]

    output = str(diagnose.get("output") or "text")
    if output not in OUTPUT_FORMATS:
        raise ValueError(f"diagnose.output must be one of {OUTPUT_FORMATS}, got {output!r}")
    note = str(diagnose.get("note") or "")
    logger.debug(f"Diagnose options: {len(paths)} image(s), output={output}, note={bool(note)}")
    return paths, note, output
