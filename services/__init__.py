"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- RoomStateService：Room 文件的預設形狀與 migration 比對
- StageService：各種舞台切換要寫入的欄位
- ClockService：epoch 毫秒時間
"""
