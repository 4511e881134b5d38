"""
API 層

這個 package 只負責 HTTP / WebSocket 介面，業務邏輯都在 core：
- rooms：Room 建立、查詢、題庫
- teams：報名、計分、搶答
- stage：舞台模式切換（host）
- websocket：Room 即時推播
"""
