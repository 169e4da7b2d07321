from dataclasses import dataclass
from pathlib import Path
import json
from typing import Any, Dict, List, Optional

from ..compositing.geometry import PrintArea


@dataclass
class MockupTemplate:
    id: str
    template_url: str
    print_area: PrintArea
    name: str = ""
    product_id: Optional[str] = None
    variant_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MockupTemplate":
        """Raises ValueError for a missing id/template_url or a malformed print_area."""
        tid = str(data.get("id") or "").strip()
        if not tid:
            raise ValueError("Missing field: id")
        url = (data.get("template_url") or "").strip()
        if not url:
            raise ValueError("Missing field: template_url")
        return cls(
            id=tid,
            template_url=url,
            print_area=PrintArea.from_dict(data.get("print_area")),
            name=data.get("name") or "",
            product_id=data.get("product_id"),
            variant_id=data.get("variant_id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "template_url": self.template_url,
            "print_area": self.print_area.to_dict(),
            "product_id": self.product_id,
            "variant_id": self.variant_id,
        }


class TemplateStore:
    """Mockup template catalog kept on disk as one JSON file (id -> record)."""

    def __init__(self, data_dir: Path, collection: str = "mockup_templates"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.collection = collection

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.collection}.json"

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _save(self, obj: Dict[str, Any]):
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(obj, f, indent=2, ensure_ascii=False)

    def list(self) -> List[MockupTemplate]:
        return [MockupTemplate.from_dict(v) for v in self._load().values()]

    def get(self, template_id: str) -> Optional[MockupTemplate]:
        raw = self._load().get(str(template_id))
        return MockupTemplate.from_dict(raw) if raw else None

    def upsert(self, template: MockupTemplate):
        data = self._load()
        data[template.id] = template.to_dict()
        self._save(data)

    def delete(self, template_id: str) -> bool:
        data = self._load()
        existed = data.pop(str(template_id), None) is not None
        if existed:
            self._save(data)
        return existed

    def replace_all(self, templates: List[MockupTemplate]):
        """Overwrite the whole catalog."""
        self._save({t.id: t.to_dict() for t in templates})
