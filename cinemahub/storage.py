"""
Durable key/value storage for client state that must survive restarts.
Plays the role browser local storage plays for a web client: string keys, string values.
"""

import json  # on-disk format
import os  # atomic replace
import tempfile  # temp file for atomic writes
from pathlib import Path  # filesystem-safe paths
from typing import Dict, Optional

from loguru import logger  # console logger


class LocalStorage:
	"""
	A small JSON file holding string entries.
	Every write rewrites the whole file through a temp file and an atomic rename.
	"""

	def __init__(self, path):
		self.path = Path(path)  # file location
		self._data: Dict[str, str] = {}  # in-memory copy
		self.load()

	def load(self) -> None:
		"""Read the file; a missing or unreadable file means empty storage."""
		self._data = {}
		if not self.path.exists():
			return
		try:
			with open(self.path, 'r', encoding='utf-8') as f:
				raw = json.load(f)
		except (OSError, json.JSONDecodeError) as e:
			logger.warning(f"[Storage] Could not read {self.path}, starting empty: {e}")
			return
		if isinstance(raw, dict):
			self._data = {str(k): str(v) for k, v in raw.items() if v is not None}

	def get(self, key: str) -> Optional[str]:
		return self._data.get(key)

	def set(self, key: str, value: str) -> None:
		self._data[key] = str(value)
		self._save()

	def update(self, entries: Dict[str, Optional[str]]) -> None:
		"""
		Set several entries in one write; None removes a key.
		If the write fails the in-memory copy is put back, so memory and disk still agree.
		"""
		snapshot = dict(self._data)
		for key, value in entries.items():
			if value is None:
				self._data.pop(key, None)
			else:
				self._data[key] = str(value)
		if self._data == snapshot:
			return
		try:
			self._save()
		except OSError:
			self._data = snapshot
			raise

	def remove(self, key: str) -> None:
		if self._data.pop(key, None) is not None:
			self._save()

	def _save(self) -> None:
		self.path.parent.mkdir(parents=True, exist_ok=True)  # ensure directory exists
		fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix='.storage_tmp_', suffix='.json')
		try:
			with os.fdopen(fd, 'w', encoding='utf-8') as f:
				json.dump(self._data, f, indent=2, ensure_ascii=False)
			os.replace(tmp, self.path)  # atomic on POSIX and Windows
		except OSError:
			if os.path.exists(tmp):
				os.remove(tmp)
			raise
		logger.debug(f"[Storage] Wrote {len(self._data)} entries to {self.path}")


class MemoryStorage(LocalStorage):
	"""Same interface, nothing written to disk. Used when no storage file is wanted."""

	def __init__(self, initial: Optional[Dict[str, str]] = None):
		self.path = None
		self._data = dict(initial or {})

	def load(self) -> None:
		pass

	def _save(self) -> None:
		pass
