"""Servicios de orquestación."""
