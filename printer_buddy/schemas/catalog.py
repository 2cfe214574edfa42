"""
Catalog schemas for printers, materials and troubleshooting guides.

These mirror the JSON shapes served by the catalog backend. Each record has a
``from_dict`` constructor that raises KeyError, TypeError or ValueError when
the payload does not match; the API client turns those into DecodeError.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class PrinterType(Enum):
    """Printing technology."""
    FDM = "fdm"
    RESIN = "resin"
    SLS = "sls"

    @property
    def display_name(self) -> str:
        return {
            PrinterType.FDM: "FDM (Filament)",
            PrinterType.RESIN: "Resin (SLA/MSLA)",
            PrinterType.SLS: "SLS (Powder)",
        }[self]


class MotionSystem(Enum):
    COREXY = "corexy"
    BEDSLINGER = "bedslinger"

    @property
    def display_name(self) -> str:
        return "CoreXY" if self is MotionSystem.COREXY else "Bed Slinger"


class MaterialType(Enum):
    """Material family. Troubleshooting guides reuse it as their printer type."""
    FDM = "fdm"
    RESIN = "resin"

    @property
    def display_name(self) -> str:
        return "FDM Filament" if self is MaterialType.FDM else "Resin"


class DifficultyLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def display_name(self) -> str:
        return self.value.title()


# --- Field Coercion Helpers ---

def _require(data: Dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict):
        raise TypeError(f"Expected object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise KeyError(f"Missing required field '{key}'")
    return data[key]


def _as_int(value: Any, key: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Field '{key}' must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Field '{key}' must be an integer, got {value}")
        return int(value)
    return value


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Field '{key}' must be a number")
    return float(value)


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"Field '{key}' must be a string")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"Field '{key}' must be a boolean")
    return value


def _str_list(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise TypeError(f"Field '{key}' must be a list")
    return tuple(_as_str(item, key) for item in value)


def _opt(data: Dict[str, Any], key: str, convert) -> Any:
    value = data.get(key)
    if value is None:
        return None
    return convert(value, key)


def _temperature_range(low: Optional[int], high: Optional[int]) -> Optional[str]:
    if low is None or high is None:
        return None
    return f"{low}–{high}°C"


# --- Printers ---

@dataclass(frozen=True)
class PrinterSummary:
    """A printer as it appears in list endpoints and recommendation results."""
    id: int
    name: str
    manufacturer: str
    price: float
    printer_type: str = PrinterType.FDM.value
    skill_levels: Tuple[str, ...] = ()
    use_cases: Tuple[str, ...] = ()
    build_volume_x: int = 0
    build_volume_y: int = 0
    build_volume_z: int = 0
    enclosure: bool = False
    auto_leveling: bool = False
    multi_color: bool = False
    motion_system: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrinterSummary":
        return cls(**_printer_common(data))

    @property
    def build_volume_description(self) -> str:
        return f"{self.build_volume_x} × {self.build_volume_y} × {self.build_volume_z} mm"

    @property
    def motion_system_display(self) -> str:
        return _motion_system_display(self.motion_system)


@dataclass(frozen=True)
class Printer(PrinterSummary):
    """Full printer detail from ``GET /printers/{id}``."""
    description: Optional[str] = None
    materials: Tuple[str, ...] = ()
    max_speed: Optional[int] = None
    layer_resolution: Optional[float] = None
    connectivity: Tuple[str, ...] = ()
    noise_level: Optional[str] = None
    product_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Printer":
        return cls(
            **_printer_common(data),
            description=_opt(data, "description", _as_str),
            materials=_str_list(data, "materials"),
            max_speed=_opt(data, "max_speed", _as_int),
            layer_resolution=_opt(data, "layer_resolution", _as_float),
            connectivity=_str_list(data, "connectivity"),
            noise_level=_opt(data, "noise_level", _as_str),
            product_url=_opt(data, "product_url", _as_str),
        )


def _motion_system_display(motion_system: Optional[str]) -> str:
    if motion_system is None:
        return "N/A"
    return "CoreXY" if motion_system == MotionSystem.COREXY.value else "Bed Slinger"


def _printer_common(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": _as_int(_require(data, "id"), "id"),
        "name": _as_str(_require(data, "name"), "name"),
        "manufacturer": _as_str(_require(data, "manufacturer"), "manufacturer"),
        "price": _as_float(_require(data, "price"), "price"),
        "printer_type": _as_str(data.get("printer_type", PrinterType.FDM.value), "printer_type"),
        "skill_levels": _str_list(data, "skill_levels"),
        "use_cases": _str_list(data, "use_cases"),
        "build_volume_x": _as_int(data.get("build_volume_x", 0), "build_volume_x"),
        "build_volume_y": _as_int(data.get("build_volume_y", 0), "build_volume_y"),
        "build_volume_z": _as_int(data.get("build_volume_z", 0), "build_volume_z"),
        "enclosure": _as_bool(data.get("enclosure", False), "enclosure"),
        "auto_leveling": _as_bool(data.get("auto_leveling", False), "auto_leveling"),
        "multi_color": _as_bool(data.get("multi_color", False), "multi_color"),
        "motion_system": _opt(data, "motion_system", _as_str),
        "image_url": _opt(data, "image_url", _as_str),
    }


# --- Materials ---

@dataclass(frozen=True)
class MaterialSummary:
    id: int
    name: str
    full_name: str
    material_type: str
    difficulty_level: str
    description: Optional[str] = None
    category: Optional[str] = None
    print_temp_min: Optional[int] = None
    print_temp_max: Optional[int] = None
    pros: Tuple[str, ...] = ()
    best_uses: Tuple[str, ...] = ()
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MaterialSummary":
        return cls(
            id=_as_int(_require(data, "id"), "id"),
            name=_as_str(_require(data, "name"), "name"),
            full_name=_as_str(_require(data, "full_name"), "full_name"),
            material_type=_as_str(_require(data, "material_type"), "material_type"),
            difficulty_level=_as_str(_require(data, "difficulty_level"), "difficulty_level"),
            description=_opt(data, "description", _as_str),
            category=_opt(data, "category", _as_str),
            print_temp_min=_opt(data, "print_temp_min", _as_int),
            print_temp_max=_opt(data, "print_temp_max", _as_int),
            pros=_str_list(data, "pros"),
            best_uses=_str_list(data, "best_uses"),
            image_url=_opt(data, "image_url", _as_str),
        )

    @property
    def temperature_range(self) -> Optional[str]:
        return _temperature_range(self.print_temp_min, self.print_temp_max)


@dataclass(frozen=True)
class CompatiblePrinter:
    id: int
    name: str
    manufacturer: str
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompatiblePrinter":
        return cls(
            id=_as_int(_require(data, "id"), "id"),
            name=_as_str(_require(data, "name"), "name"),
            manufacturer=_as_str(_require(data, "manufacturer"), "manufacturer"),
            image_url=_opt(data, "image_url", _as_str),
        )


@dataclass(frozen=True)
class Material:
    """Full material detail from ``GET /materials/{id}``."""
    id: int
    name: str
    full_name: str
    material_type: str
    difficulty_level: str
    description: Optional[str] = None
    category: Optional[str] = None

    # FDM temperatures
    print_temp_min: Optional[int] = None
    print_temp_max: Optional[int] = None
    bed_temp_min: Optional[int] = None
    bed_temp_max: Optional[int] = None

    # Resin settings
    exposure_time_s: Optional[float] = None
    uv_wavelength_nm: Optional[int] = None

    pros: Tuple[str, ...] = ()
    cons: Tuple[str, ...] = ()
    best_uses: Tuple[str, ...] = ()
    example_projects: Tuple[str, ...] = ()
    printing_tips: Tuple[str, ...] = ()
    post_processing: Tuple[str, ...] = ()
    properties: Dict[str, str] = field(default_factory=dict)

    printer_material_name: Optional[str] = None
    compatible_printers: Tuple[CompatiblePrinter, ...] = ()
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Material":
        properties = data.get("properties") or {}
        if not isinstance(properties, dict):
            raise TypeError("Field 'properties' must be an object")
        compatible = data.get("compatible_printers") or []
        if not isinstance(compatible, list):
            raise TypeError("Field 'compatible_printers' must be a list")

        return cls(
            id=_as_int(_require(data, "id"), "id"),
            name=_as_str(_require(data, "name"), "name"),
            full_name=_as_str(_require(data, "full_name"), "full_name"),
            material_type=_as_str(_require(data, "material_type"), "material_type"),
            difficulty_level=_as_str(_require(data, "difficulty_level"), "difficulty_level"),
            description=_opt(data, "description", _as_str),
            category=_opt(data, "category", _as_str),
            print_temp_min=_opt(data, "print_temp_min", _as_int),
            print_temp_max=_opt(data, "print_temp_max", _as_int),
            bed_temp_min=_opt(data, "bed_temp_min", _as_int),
            bed_temp_max=_opt(data, "bed_temp_max", _as_int),
            exposure_time_s=_opt(data, "exposure_time_s", _as_float),
            uv_wavelength_nm=_opt(data, "uv_wavelength_nm", _as_int),
            pros=_str_list(data, "pros"),
            cons=_str_list(data, "cons"),
            best_uses=_str_list(data, "best_uses"),
            example_projects=_str_list(data, "example_projects"),
            printing_tips=_str_list(data, "printing_tips"),
            post_processing=_str_list(data, "post_processing"),
            properties={str(k): str(v) for k, v in properties.items()},
            printer_material_name=_opt(data, "printer_material_name", _as_str),
            compatible_printers=tuple(CompatiblePrinter.from_dict(p) for p in compatible),
            image_url=_opt(data, "image_url", _as_str),
        )

    @property
    def print_temperature_range(self) -> Optional[str]:
        return _temperature_range(self.print_temp_min, self.print_temp_max)

    @property
    def bed_temperature_range(self) -> Optional[str]:
        return _temperature_range(self.bed_temp_min, self.bed_temp_max)


# --- Troubleshooting ---

@dataclass(frozen=True)
class SolutionStep:
    step: int
    title: str
    description: str
    tip: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SolutionStep":
        return cls(
            step=_as_int(_require(data, "step"), "step"),
            title=_as_str(_require(data, "title"), "title"),
            description=_as_str(_require(data, "description"), "description"),
            tip=_opt(data, "tip", _as_str),
        )


@dataclass(frozen=True)
class PrintIssueSummary:
    id: int
    name: str
    description: str
    printer_type: str
    difficulty_level: str
    category: Optional[str] = None
    symptoms: Tuple[str, ...] = ()
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrintIssueSummary":
        return cls(**_issue_common(data))

    @property
    def symptoms_preview(self) -> str:
        """First two symptoms, comma separated."""
        return ", ".join(self.symptoms[:2])


@dataclass(frozen=True)
class PrintIssue(PrintIssueSummary):
    """Full troubleshooting guide from ``GET /troubleshooting/{id}``."""
    causes: Tuple[str, ...] = ()
    solutions: Tuple[SolutionStep, ...] = ()
    related_materials: Tuple[str, ...] = ()
    prevention_tips: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrintIssue":
        solutions = data.get("solutions") or []
        if not isinstance(solutions, list):
            raise TypeError("Field 'solutions' must be a list")
        return cls(
            **_issue_common(data),
            causes=_str_list(data, "causes"),
            solutions=tuple(SolutionStep.from_dict(s) for s in solutions),
            related_materials=_str_list(data, "related_materials"),
            prevention_tips=_str_list(data, "prevention_tips"),
        )


def _issue_common(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": _as_int(_require(data, "id"), "id"),
        "name": _as_str(_require(data, "name"), "name"),
        "description": _as_str(_require(data, "description"), "description"),
        "printer_type": _as_str(_require(data, "printer_type"), "printer_type"),
        "difficulty_level": _as_str(_require(data, "difficulty_level"), "difficulty_level"),
        "category": _opt(data, "category", _as_str),
        "symptoms": _str_list(data, "symptoms"),
        "image_url": _opt(data, "image_url", _as_str),
    }


# --- Query Filters ---

def _query_bool(value: bool) -> str:
    return "true" if value else "false"


@dataclass
class PrinterFilters:
    """Optional query filters for ``GET /printers``. Unset fields are omitted."""
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    skill_level: Optional[str] = None
    use_case: Optional[str] = None
    printer_type: Optional[str] = None
    motion_system: Optional[str] = None
    has_enclosure: Optional[bool] = None
    has_multi_color: Optional[bool] = None

    def to_params(self) -> List[Tuple[str, str]]:
        params: List[Tuple[str, str]] = []
        if self.price_min is not None:
            params.append(("price_min", str(self.price_min)))
        if self.price_max is not None:
            params.append(("price_max", str(self.price_max)))
        for key in ("skill_level", "use_case", "printer_type", "motion_system"):
            value = getattr(self, key)
            if value is not None:
                params.append((key, value))
        if self.has_enclosure is not None:
            params.append(("has_enclosure", _query_bool(self.has_enclosure)))
        if self.has_multi_color is not None:
            params.append(("has_multi_color", _query_bool(self.has_multi_color)))
        return params


@dataclass
class MaterialFilters:
    material_type: Optional[MaterialType] = None
    difficulty_level: Optional[DifficultyLevel] = None

    @property
    def is_empty(self) -> bool:
        return self.material_type is None and self.difficulty_level is None

    def to_params(self) -> List[Tuple[str, str]]:
        params: List[Tuple[str, str]] = []
        if self.material_type is not None:
            params.append(("material_type", self.material_type.value))
        if self.difficulty_level is not None:
            params.append(("difficulty_level", self.difficulty_level.value))
        return params


@dataclass
class TroubleshootingFilters:
    printer_type: Optional[MaterialType] = None
    difficulty_level: Optional[DifficultyLevel] = None
    search: str = ""

    @property
    def has_search(self) -> bool:
        return bool(self.search.strip())

    @property
    def is_empty(self) -> bool:
        return self.printer_type is None and self.difficulty_level is None and not self.search

    def to_params(self) -> List[Tuple[str, str]]:
        params: List[Tuple[str, str]] = []
        if self.printer_type is not None:
            params.append(("printer_type", self.printer_type.value))
        if self.difficulty_level is not None:
            params.append(("difficulty_level", self.difficulty_level.value))
        if self.has_search:
            params.append(("search", self.search))
        return params
