"""Archive extraction and text segmentation."""
