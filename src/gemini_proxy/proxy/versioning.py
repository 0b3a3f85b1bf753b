"""
Négociation de version d'API et compatibilité du body.

`v1` ne supporte pas `systemInstruction`, `tool_config` ni `tool_calls`.
Les formes de body inattendues ne lèvent jamais d'exception: absence de
la forme attendue = pas de correspondance.
"""
from typing import Any, Iterable, Optional

from ..core.constants import RESTRICTED_FIELDS
from ..core.models import ApiVersion


def path_version(path: str) -> Optional[ApiVersion]:
    """Version imposée par le préfixe du chemin (`/v1/`, `/v1beta/`), sinon None."""
    for version in (ApiVersion.V1, ApiVersion.V1BETA):
        if path.startswith(f"/{version.value}/"):
            return version
    return None


def _has_any(obj: Any, fields: Iterable[str]) -> bool:
    if not isinstance(obj, dict):
        return False
    return any(obj.get(name) for name in fields)


def _iter_parts(body: dict):
    contents = body.get("contents")
    if not isinstance(contents, list):
        return
    for content in contents:
        if not isinstance(content, dict):
            continue
        parts = content.get("parts")
        if not isinstance(parts, list):
            continue
        yield from parts


def has_beta_features(body: Any, fields: Iterable[str] = RESTRICTED_FIELDS) -> bool:
    """
    Détecte les fonctionnalités réservées à v1beta.

    Cherche une valeur vraie pour l'un des `fields` à la racine du body
    et dans chaque élément de `contents[*].parts[*]`.
    """
    if not isinstance(body, dict):
        return False
    fields = tuple(fields)
    if _has_any(body, fields):
        return True
    return any(_has_any(part, fields) for part in _iter_parts(body))


def negotiate_version(
    path: str,
    body: Any,
    default: ApiVersion = ApiVersion.V1BETA
) -> ApiVersion:
    """
    Choisit la version upstream d'une requête.

    Le préfixe explicite du chemin gagne toujours, sans inspection du body.

    Args:
        path: Chemin entrant
        body: Body décodé (ou octets bruts, ou None)
        default: Version par défaut configurée

    Returns:
        Version cible
    """
    explicit = path_version(path)
    if explicit is not None:
        return explicit
    if has_beta_features(body):
        return ApiVersion.V1BETA
    return default


def strip_restricted_fields(value: Any, fields: Iterable[str] = RESTRICTED_FIELDS) -> Any:
    """
    Retourne un nouvel arbre sans les `fields`, à toute profondeur.

    Les dicts et listes sont reconstruits, les scalaires retournés tels quels:
    l'entrée n'est jamais modifiée. Parcours itératif avec une pile
    explicite: la profondeur n'est pas limitée par la pile d'appels.
    """
    fields = frozenset(fields)
    stack = []
    root = _new_node(value, stack)
    while stack:
        source, target = stack.pop()
        if isinstance(source, dict):
            for key, item in source.items():
                if key not in fields:
                    target[key] = _new_node(item, stack)
        else:
            for item in source:
                target.append(_new_node(item, stack))
    return root


def _new_node(value: Any, stack: list) -> Any:
    # Conteneur vide à remplir plus tard, ou scalaire tel quel
    if isinstance(value, dict):
        node = {}
    elif isinstance(value, list):
        node = []
    else:
        return value
    stack.append((value, node))
    return node


def make_body_compatible(body: Any, version: ApiVersion) -> Any:
    """
    Rend le body acceptable pour `version`.

    Hors v1, le body est retourné tel quel (même objet). Pour v1, une
    copie profonde sans les champs restreints.
    """
    if version != ApiVersion.V1 or not isinstance(body, (dict, list)):
        return body
    return strip_restricted_fields(body)
