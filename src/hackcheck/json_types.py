from __future__ import annotations

"""JSON-like value types used on the client/server channel.

Responses decoded off the wire are typed with these aliases until a command
narrows them into a concrete DTO.
"""

from typing import TypeAlias


JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]
JSONArray: TypeAlias = list[JSONValue]
