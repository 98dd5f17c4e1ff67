"""Raw record loaders, looked up by source kind."""

from sales_insights.loaders.base import BaseLoader
from sales_insights.loaders.files import CsvDirectoryLoader, JsonDirectoryLoader
from sales_insights.loaders.http import HttpJsonLoader

LOADERS: dict[str, type[BaseLoader]] = {
    loader.source_id: loader for loader in (JsonDirectoryLoader, CsvDirectoryLoader, HttpJsonLoader)
}


def get_loader(source: str, **kwargs) -> BaseLoader:
    """Build the loader for a source kind (json, csv, http); kwargs go to its constructor."""
    loader_cls = LOADERS.get(source.strip().lower())
    if loader_cls is None:
        raise ValueError(f"Unknown source: {source}. Available: {', '.join(LOADERS)}")
    return loader_cls(**kwargs)


__all__ = ["LOADERS", "BaseLoader", "CsvDirectoryLoader", "HttpJsonLoader", "JsonDirectoryLoader", "get_loader"]
