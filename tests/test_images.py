"""
Unit tests for machine image resolution
"""
from workerplan.images import append_machine_image, find_image_in_catalog, find_machine_image
from workerplan.models import ImageCatalog, MachineImageStatus

CATALOG = ImageCatalog.from_provider_config({
    "machineImages": [
        {
            "name": "my-os",
            "versions": [
                {
                    "version": "123",
                    "image": "my-image-in-glance",
                    "regions": [
                        {"name": "eu-de-2", "id": "my-image-id"},
                        {"name": "eu-de-2", "id": "my-arm-image-id", "architecture": "arm64"},
                    ],
                },
                {
                    "version": "124",
                    "regions": [{"name": "eu-de-2", "id": "id-124"}],
                },
            ],
        }
    ]
})


class TestFindImageInCatalog:
    """Tests for find_image_in_catalog"""

    def test_region_mapping_yields_id(self):
        image = find_image_in_catalog(CATALOG, "my-os", "123", "eu-de-2")
        assert image == MachineImageStatus(name="my-os", version="123", id="my-image-id", architecture="amd64")

    def test_image_name_without_region_mapping(self):
        image = find_image_in_catalog(CATALOG, "my-os", "123", "eu-de-1")
        assert image == MachineImageStatus(name="my-os", version="123", image="my-image-in-glance")

    def test_architecture(self):
        """Test arm64 only matches region mappings for arm64"""
        assert find_image_in_catalog(CATALOG, "my-os", "123", "eu-de-2", "arm64").id == "my-arm-image-id"
        assert find_image_in_catalog(CATALOG, "my-os", "123", "eu-de-1", "arm64") is None

    def test_not_found(self):
        assert find_image_in_catalog(CATALOG, "my-os", "999", "eu-de-2") is None
        assert find_image_in_catalog(CATALOG, "other-os", "123", "eu-de-2") is None
        assert find_image_in_catalog(CATALOG, "my-os", "124", "eu-de-1") is None
        assert find_image_in_catalog(ImageCatalog(), "my-os", "123", "eu-de-1") is None


class TestStatusImages:
    """Tests for previously resolved images"""

    def test_find_machine_image(self):
        images = [MachineImageStatus(name="my-os", version="123", image="glance")]
        assert find_machine_image(images, "my-os", "123").image == "glance"
        assert find_machine_image(images, "my-os", "123", "arm64") is None
        assert find_machine_image(images, "my-os", "124") is None

    def test_append_deduplicates(self):
        images = []
        append_machine_image(images, MachineImageStatus(name="my-os", version="123", image="glance"))
        append_machine_image(images, MachineImageStatus(name="my-os", version="123", image="glance"))
        append_machine_image(images, MachineImageStatus(name="my-os", version="124", image="glance"))
        assert [i.version for i in images] == ["123", "124"]

    def test_status_document(self):
        assert MachineImageStatus(name="my-os", version="123", id="x").to_dict() == {
            "name": "my-os", "version": "123", "id": "x", "architecture": "amd64",
        }
        assert MachineImageStatus(name="my-os", version="123", image="y").to_dict() == {
            "name": "my-os", "version": "123", "image": "y", "architecture": "amd64",
        }
