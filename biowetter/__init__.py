"""Biowetter acquisition layer: feeds in, one unified weather record out."""
