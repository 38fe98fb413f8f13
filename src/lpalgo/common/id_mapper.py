"""
ID mapping utilities for the lpalgo library.

The engines work on integer node identifiers. Edge lists coming from real
data use arbitrary identifiers (user names, UUIDs, tuples), and NetworkIt
requires consecutive integers starting at 0. ``IDMapper`` keeps a
bidirectional mapping between the two.
"""

from typing import Any, Dict, List


class IDMapper:
    """
    Bidirectional mapping between original and internal node IDs.

    Attributes
    ----------
    original_to_internal : Dict[Any, int]
        Maps original IDs to internal integer IDs (0, 1, 2, ...)
    internal_to_original : Dict[int, Any]
        Maps internal integer IDs back to original IDs

    Examples
    --------
    >>> mapper = IDMapper()
    >>> mapper.add_mapping("alice", 0)
    >>> mapper.add_mapping("bob", 1)
    >>> mapper.get_internal("bob")
    1
    >>> mapper.get_original(0)
    'alice'

    Notes
    -----
    Safe for concurrent reads; modifications are not synchronized.
    """

    def __init__(self) -> None:
        self.original_to_internal: Dict[Any, int] = {}
        self.internal_to_original: Dict[int, Any] = {}

    def get_internal(self, original_id: Any) -> int:
        """
        Get the internal ID for an original ID.

        Raises
        ------
        KeyError
            If original_id is not mapped
        """
        try:
            return self.original_to_internal[original_id]
        except KeyError:
            raise KeyError(f"Original ID '{original_id}' not found in mapping")

    def get_original(self, internal_id: int) -> Any:
        """
        Get the original ID for an internal ID.

        Raises
        ------
        KeyError
            If internal_id is not mapped
        TypeError
            If internal_id is not an integer
        """
        if not isinstance(internal_id, int):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id)}")

        try:
            return self.internal_to_original[internal_id]
        except KeyError:
            raise KeyError(f"Internal ID {internal_id} not found in mapping")

    def get_internal_batch(self, original_ids: List[Any]) -> List[int]:
        """Map a list of original IDs to internal IDs."""
        if not isinstance(original_ids, list):
            raise TypeError(f"original_ids must be a list, got {type(original_ids)}")

        return [self.get_internal(original_id) for original_id in original_ids]

    def get_original_batch(self, internal_ids: List[int]) -> List[Any]:
        """Map a list of internal IDs to original IDs."""
        if not isinstance(internal_ids, list):
            raise TypeError(f"internal_ids must be a list, got {type(internal_ids)}")

        return [self.get_original(internal_id) for internal_id in internal_ids]

    def add_mapping(self, original_id: Any, internal_id: int) -> None:
        """
        Add a new ID mapping pair.

        Parameters
        ----------
        original_id : Any
            Original node identifier (must be hashable)
        internal_id : int
            Internal ID (non-negative integer)

        Raises
        ------
        ValueError
            If either ID is already mapped, or internal_id is negative
        TypeError
            If internal_id is not an integer or original_id is not hashable
        """
        if not isinstance(internal_id, int):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id)}")

        if internal_id < 0:
            raise ValueError(f"Internal ID must be non-negative, got {internal_id}")

        try:
            hash(original_id)
        except TypeError:
            raise TypeError(f"Original ID must be hashable, got {type(original_id)}")

        if original_id in self.original_to_internal:
            existing_internal = self.original_to_internal[original_id]
            raise ValueError(
                f"Original ID '{original_id}' already mapped to internal ID {existing_internal}"
            )

        if internal_id in self.internal_to_original:
            existing_original = self.internal_to_original[internal_id]
            raise ValueError(
                f"Internal ID {internal_id} already mapped to original ID '{existing_original}'"
            )

        self.original_to_internal[original_id] = internal_id
        self.internal_to_original[internal_id] = original_id

    def has_original(self, original_id: Any) -> bool:
        return original_id in self.original_to_internal

    def has_internal(self, internal_id: int) -> bool:
        return internal_id in self.internal_to_original

    def size(self) -> int:
        """Number of mapped node IDs."""
        return len(self.original_to_internal)

    def is_empty(self) -> bool:
        return not self.original_to_internal

    def to_dict(self) -> Dict[str, Dict]:
        """
        Export the mapping as a dictionary.

        Internal IDs are stringified in ``internal_to_original`` so the result
        can be written as JSON; :meth:`from_dict` reverses this.
        """
        return {
            'original_to_internal': dict(self.original_to_internal),
            'internal_to_original': {str(k): v for k, v in self.internal_to_original.items()}
        }

    @classmethod
    def from_dict(cls, mapping: Dict[str, Dict]) -> 'IDMapper':
        """
        Rebuild an IDMapper from the output of :meth:`to_dict`.

        Raises
        ------
        KeyError
            If a required key is missing
        ValueError
            If the two directions are inconsistent
        """
        try:
            original_to_internal = mapping['original_to_internal']
            internal_to_original_str = mapping['internal_to_original']
        except KeyError as e:
            raise KeyError(f"Missing required key in mapping dictionary: {e}")

        try:
            internal_to_original = {int(k): v for k, v in internal_to_original_str.items()}
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid internal ID in mapping: {e}")

        if len(original_to_internal) != len(internal_to_original):
            raise ValueError(
                f"Inconsistent mapping sizes: {len(original_to_internal)} vs {len(internal_to_original)}"
            )

        mapper = cls()
        for original_id, internal_id in original_to_internal.items():
            if internal_to_original.get(internal_id) != original_id:
                raise ValueError(
                    f"Inconsistent mapping for original ID '{original_id}' and internal ID {internal_id}"
                )
            mapper.add_mapping(original_id, internal_id)

        return mapper

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, original_id: Any) -> bool:
        return self.has_original(original_id)

    def __str__(self) -> str:
        if self.is_empty():
            return "IDMapper(empty)"
        return f"IDMapper({self.size()} nodes)"

    def __repr__(self) -> str:
        return f"IDMapper(size={self.size()})"
