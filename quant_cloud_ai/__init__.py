"""Quant Cloud AI provider — chat, embeddings, image generation and vector DB."""
