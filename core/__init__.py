"""
核心業務邏輯層

這個 package 包含所有房間核心邏輯，包括：
- Room Store：Room 文件的讀寫、原子性 transaction、推播訂閱
- Manager：Room 的生命週期（建立、migration、題庫）
- 搶答器與計分：需要原子性的三個操作
- Stage Controller：舞台模式的狀態機
- Locks：並發控制工具
"""
