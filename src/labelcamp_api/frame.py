from __future__ import annotations

from typing import Any, Mapping, Optional

import msgspec
import pandas as pd

from ._json_schemas.base import ApiBase, _DataBase

__all__ = ['resources_to_df']


def resources_to_df(body: Optional[Mapping[str, Any]]) -> pd.DataFrame:
    """
    Tabulate the resources of a JSON:API response document.

    One row per resource in ``body['data']`` (a single resource gives one row),
    columns 'id', 'type' followed by the resource attributes.
    An empty body (e.g. 204 No Content) gives an empty frame.

    :param body: Decoded response document
    :return: DataFrame of resources
    """
    if body is None:
        return pd.DataFrame([], columns=_columns([]))
    doc = msgspec.convert(body, type=ApiBase)
    data = doc.data
    if data is None:
        data = []
    elif not isinstance(data, list):
        data = [data]
    resources = msgspec.convert(data, type=list[_DataBase])
    # resource id and type take precedence over attributes of the same name
    rows = [{**r.attributes, 'id': r.id, 'type': r.type} for r in resources]
    return pd.DataFrame(rows, columns=_columns(resources))


def _columns(resources) -> list[str]:
    columns = ['id', 'type']
    for r in resources:
        for k in r.attributes:
            if k not in columns:
                columns.append(k)
    return columns
