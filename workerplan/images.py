"""
Images module - Resolves abstract machine images to OpenStack image names or ids
"""
from typing import Iterable, List, Optional

from .models import ARCHITECTURE_AMD64, ImageCatalog, MachineImageStatus


def find_image_in_catalog(catalog: ImageCatalog, name: str, version: str, region: str,
                          architecture: str = ARCHITECTURE_AMD64) -> Optional[MachineImageStatus]:
    """
    Look up an image in the cloud profile catalog.

    A region mapping for `region` and `architecture` wins and yields an image
    id. Otherwise the version-wide image name is used, which only exists for
    amd64. Returns None when nothing matches.
    """
    architecture = architecture or ARCHITECTURE_AMD64

    for image in catalog.images:
        if image.name != name:
            continue
        for entry in image.versions:
            if entry.version != version:
                continue

            for mapping in entry.regions:
                if mapping.name == region and mapping.architecture == architecture:
                    return MachineImageStatus(
                        name=name,
                        version=version,
                        id=mapping.id,
                        architecture=architecture,
                    )

            if entry.image and architecture == ARCHITECTURE_AMD64:
                return MachineImageStatus(
                    name=name,
                    version=version,
                    image=entry.image,
                    architecture=ARCHITECTURE_AMD64,
                )

    return None


def find_machine_image(images: Iterable[MachineImageStatus], name: str, version: str,
                       architecture: str = ARCHITECTURE_AMD64) -> Optional[MachineImageStatus]:
    """Find an image among previously resolved images (e.g. from the worker status)"""
    architecture = architecture or ARCHITECTURE_AMD64
    for image in images:
        if image.name == name and image.version == version and image.architecture == architecture:
            return image
    return None


def append_machine_image(images: List[MachineImageStatus], image: MachineImageStatus) -> List[MachineImageStatus]:
    """Append `image` unless an image with the same name, version and architecture is present"""
    if find_machine_image(images, image.name, image.version, image.architecture) is not None:
        return images
    images.append(image)
    return images
